from dataclasses import dataclass


@dataclass
class Category:
    id: int
    name: str
    color_hex: str = "#888888"
    icon: str = "tag"
    is_system: bool = False
