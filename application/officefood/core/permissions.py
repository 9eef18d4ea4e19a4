from typing import Dict
from officefood.core.constants import UserRole
from officefood.core.exceptions import Forbidden, Unauthorized


def require_company(user: Dict) -> str:
    company_id = user.get("companyId")
    if not company_id:
        raise Unauthorized("User company not found")
    return company_id


def is_admin(user: Dict) -> bool:
    return user.get("role") == UserRole.ADMIN


def require_admin(user: Dict) -> None:
    if not is_admin(user):
        raise Forbidden("Admin access required")
