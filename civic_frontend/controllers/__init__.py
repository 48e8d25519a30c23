from .admin import AdminController
from .citizen import CitizenController
from .public import PublicController

__all__ = ["AdminController", "CitizenController", "PublicController"]
