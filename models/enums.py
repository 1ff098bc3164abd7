from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# MODULE KEY
# -----------------------------------------------------
class ModuleKey(BaseStrEnum):
    """Protected resource domains of the console."""

    campaign = "campaign"
    properties = "properties"
    user_management = "user_management"


# -----------------------------------------------------
# ACTION KEY
# -----------------------------------------------------
class ActionKey(BaseStrEnum):
    """Operations within a module, in dependency order (view first)."""

    view = "view"
    add = "add"
    edit = "edit"
    delete = "delete"
