from dataclasses import dataclass

from src.bookshelf.core.services import StorageGateway


@dataclass
class ApplicationDependencies:
    storage: StorageGateway
    owns_storage: bool = True
