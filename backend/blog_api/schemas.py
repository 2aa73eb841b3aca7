from .models import CustomModel


class MessageResponse(CustomModel):
    message: str
