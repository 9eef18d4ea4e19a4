from typing import Dict
from sqlalchemy.orm import Session
from officefood.core.exceptions import NotFound
from officefood.dto.users import UserProfileUpdate
from officefood.logging.utils import get_app_logger
from officefood.middlewares.request_context import request_context
from officefood.repository.users import UsersRepository

logger = get_app_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        request_context.module_name = 'user_service'
        self.db = db
        self.users = UsersRepository(db)

    def get_profile(self, user_id: str) -> Dict:
        user = self.users.get_by_id(user_id, include_company=True)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, user_id: str, cmd: UserProfileUpdate) -> Dict:
        fields = cmd.model_dump(exclude_unset=True)
        if self.users.update(user_id, fields) is None:
            raise NotFound("User not found")
        self.db.commit()
        logger.info(f"user_profile_updated | user_id={user_id} fields={sorted(fields)}")
        return self.get_profile(user_id)

    def get_user(self, user_id: str, caller: Dict) -> Dict:
        """Look up a user in the caller's company; other tenants read as absent."""
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        same_company = caller.get("companyId") is not None and user["companyId"] == caller["companyId"]
        if user["id"] != caller["id"] and not same_company:
            logger.warning(f"user_lookup_denied | user_id={user_id} caller_id={caller['id']}")
            raise NotFound("User not found")
        return user
