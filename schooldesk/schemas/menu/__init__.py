from .requests import MenuCreate, MenuUpdate
from .responses import MenuResponse

__all__ = ["MenuCreate", "MenuUpdate", "MenuResponse"]
