"""
Authentication state handed to the profile controller
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserProfile:
    user_id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class AuthState:
    is_loaded: bool = False
    is_signed_in: bool = False
    user: Optional[UserProfile] = None

    @classmethod
    def loading(cls) -> "AuthState":
        return cls()

    @classmethod
    def signed_out(cls) -> "AuthState":
        return cls(is_loaded=True)

    @classmethod
    def signed_in(cls, user: UserProfile) -> "AuthState":
        return cls(is_loaded=True, is_signed_in=True, user=user)
