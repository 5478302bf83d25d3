from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import ClassVar, Iterable, Union


class CategoryCapability(str, Enum):
    VIEW = "view"
    CREATE = "create"
    MANAGE = "manage"


class Capability(BaseModel):
    """Effective (view, create, manage) triple for one user on one category."""

    model_config = ConfigDict(frozen=True)

    can_view: bool = False
    can_create: bool = False
    can_manage: bool = False

    @classmethod
    def none(cls) -> "Capability":
        return cls()

    @classmethod
    def full(cls) -> "Capability":
        return cls(can_view=True, can_create=True, can_manage=True)

    @classmethod
    def union(cls, grants: Iterable) -> "Capability":
        """OR-fold any objects exposing can_view/can_create/can_manage."""
        can_view = can_create = can_manage = False
        for grant in grants:
            can_view = can_view or grant.can_view
            can_create = can_create or grant.can_create
            can_manage = can_manage or grant.can_manage
        return cls(can_view=can_view, can_create=can_create, can_manage=can_manage)

    def allows(self, capability: CategoryCapability) -> bool:
        if capability is CategoryCapability.VIEW:
            return self.can_view
        if capability is CategoryCapability.CREATE:
            return self.can_create
        return self.can_manage

    @property
    def is_manageable(self) -> bool:
        # View-only access does not make a category manageable
        return self.can_create or self.can_manage


class Admin(BaseModel):
    model_config = ConfigDict(frozen=True)

    def describe(self) -> str:
        return "requires admin"


class CategoryPermission(BaseModel):
    model_config = ConfigDict(frozen=True)

    capability: ClassVar[CategoryCapability]

    guild_id: int
    category_id: int

    def __init__(self, **data):
        if type(self) is CategoryPermission:
            raise TypeError("CategoryPermission is abstract, use CategoryView, CategoryCreate or CategoryManage")
        super().__init__(**data)

    def describe(self) -> str:
        return (
            f"requires {self.capability.value} on category {self.category_id} "
            f"in guild {self.guild_id}"
        )


class CategoryView(CategoryPermission):
    capability: ClassVar[CategoryCapability] = CategoryCapability.VIEW


class CategoryCreate(CategoryPermission):
    capability: ClassVar[CategoryCapability] = CategoryCapability.CREATE


class CategoryManage(CategoryPermission):
    capability: ClassVar[CategoryCapability] = CategoryCapability.MANAGE


Permission = Union[Admin, CategoryView, CategoryCreate, CategoryManage]
