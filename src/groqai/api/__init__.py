from .audio import AudioAPI
from .batches import BatchesAPI
from .chat import ChatAPI, ChatRequestBuilder
from .files import FilesAPI
from .fine_tunings import FineTuningsAPI
from .models import ModelsAPI

__all__ = [
    "AudioAPI",
    "BatchesAPI",
    "ChatAPI",
    "ChatRequestBuilder",
    "FilesAPI",
    "FineTuningsAPI",
    "ModelsAPI",
]
