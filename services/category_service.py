import re
from database.category_dao import CategoryDAO
from models.category import Category
from services.errors import NotFoundError, ValidationError
from utils.constants import CATEGORY_NAME_MAX_LEN

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class CategoryService:
    def __init__(self, category_dao: CategoryDAO):
        self._dao = category_dao

    def get_all(self) -> list[Category]:
        return self._dao.get_all()

    def get_by_id(self, category_id: int) -> Category:
        category = self._dao.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def create(self, name: str, color_hex: str, icon: str = "tag") -> Category:
        name = self._validate(name, color_hex)
        existing = [c.name.lower() for c in self._dao.get_all()]
        if name.lower() in existing:
            raise ValidationError("name", f"A category named '{name}' already exists.")
        return self._dao.create(name, color_hex, icon)

    def update(self, category_id: int, name: str, color_hex: str, icon: str = "tag") -> Category:
        self.get_by_id(category_id)
        name = self._validate(name, color_hex)
        existing = [c for c in self._dao.get_all() if c.id != category_id]
        if any(c.name.lower() == name.lower() for c in existing):
            raise ValidationError("name", f"A category named '{name}' already exists.")
        return self._dao.update(category_id, name, color_hex, icon)

    def delete(self, category_id: int):
        cat = self.get_by_id(category_id)
        if cat.is_system:
            raise ValueError("System categories cannot be deleted.")
        if self._dao.is_in_use(category_id):
            raise ValueError("Cannot delete a category used by expenses or recurring expenses.")
        self._dao.delete(category_id)

    def _validate(self, name: str, color_hex: str) -> str:
        name = name.strip()
        if not name:
            raise ValidationError("name", "Category name cannot be empty.")
        if len(name) > CATEGORY_NAME_MAX_LEN:
            raise ValidationError("name", f"Category name cannot exceed {CATEGORY_NAME_MAX_LEN} characters.")
        if not _HEX_COLOR.match(color_hex or ""):
            raise ValidationError("color_hex", "Please provide a valid hex color.")
        return name
