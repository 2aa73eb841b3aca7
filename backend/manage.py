import asyncio

import typer

from blog_api.config import settings
from blog_api.database import RecordStore
from blog_api.errors import BlogError
from blog_api.users.models import User, UserRole
from blog_api.users.schema import UserCreate
from blog_api.users.service import create_user, get_user_by_username

cli = typer.Typer()


async def create_admin_runner(username: str, email: str, password: str, db_file: str) -> User | None:
    """Load the store, create the admin account and report the outcome."""
    store = await RecordStore(db_file).load()

    if get_user_by_username(username, store) is not None:
        print(f"❌ User '{username}' already exists")
        return None

    user_data = UserCreate(username=username, email=email, password=password)
    print(f"Creating admin user '{username}'...")
    admin_user = await create_user(user_data, store, role=UserRole.ADMIN)

    print("\n✅ Admin user created successfully!")
    print(f"   ID: {admin_user.id}")
    print(f"   Username: {admin_user.username}")
    print(f"   Email: {admin_user.email}")
    print(f"   Role: {admin_user.role.value}")
    return admin_user


@cli.command(name="create-admin")
def createadmin(
    username: str = typer.Option("admin", "--username", "-u", help="Admin's username."),
    email: str = typer.Option("admin@blog.com", "--email", "-e", help="Admin's email address."),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Admin's secure password."),
    db_file: str = typer.Option(settings.DB_FILE, "--db-file", help="Path of the JSON database."),
):
    """
    Creates a user with 'admin' privileges in the JSON database.
    """
    try:
        created = asyncio.run(create_admin_runner(username, email, password, db_file))
    except BlogError as e:
        print(f"\n❌ Error creating admin user: {e.message}")
        raise typer.Exit(code=1)
    if created is None:
        raise typer.Exit(code=1)


@cli.command(name="init-db")
def init_db(
    db_file: str = typer.Option(settings.DB_FILE, "--db-file", help="Path of the JSON database."),
):
    """
    Creates the JSON database with empty collections if it does not exist yet.
    """
    store = asyncio.run(RecordStore(db_file).load())
    counts = ", ".join(f"{name}={len(items)}" for name, items in store.snapshot().items())
    print(f"✅ {store.path}: {counts}")


@cli.command()
def runserver(
    host: str = typer.Option(settings.APP_HOST, "--host", help="Bind address."),
    port: int = typer.Option(settings.APP_PORT, "--port", help="Bind port."),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes."),
):
    """
    Runs the API with uvicorn.
    """
    import uvicorn

    uvicorn.run("blog_api.main:app", host=host, port=port, reload=reload, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    cli()
