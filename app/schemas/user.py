from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: int
    email: EmailStr
    username: str
    role: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class TokenOut(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserOut

class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=1)

class AdminUserUpdate(BaseModel):
    role: str
    password: str | None = None # Opcional, solo si se quiere cambiar
