"""Pydantic schemas for the named lookup entities."""

from pydantic import BaseModel, Field


class LookupBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)

    model_config = {"str_strip_whitespace": True}


class DepartmentCreate(LookupBase):
    pass


class DepartmentOut(LookupBase):
    department_id: int

    model_config = {"from_attributes": True}


class RoleCreate(LookupBase):
    pass


class RoleOut(LookupBase):
    role_id: int

    model_config = {"from_attributes": True}


class TaskStatusCreate(LookupBase):
    pass


class TaskStatusOut(LookupBase):
    task_status_id: int

    model_config = {"from_attributes": True}
