from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime


class AdminBase(BaseModel):
    email: EmailStr
    full_name: str = "Administrator"


class AdminCreate(AdminBase):
    password: str


class AdminLogin(BaseModel):
    email: EmailStr
    password: str


class AdminResponse(AdminBase):
    id: Optional[str] = None
    created_at: Optional[datetime] = None


class Admin(AdminResponse):
    password: str
