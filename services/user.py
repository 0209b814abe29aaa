import config
from exceptions.user import NotAuthenticatedException, AdminRequiredException
from utils.permission_utils import is_admin_user
from utils.session_token import verify_session_token, SessionTokenError


class UserService:

    @staticmethod
    def authenticate(session_token: str | None) -> int:
        """
        Resolves the caller from a session token.

        Raises:
            NotAuthenticatedException: token missing, forged or expired
        """
        try:
            return verify_session_token(session_token, config.SESSION_SECRET, config.SESSION_MAX_AGE_SECONDS)
        except SessionTokenError as e:
            raise NotAuthenticatedException(str(e)) from e

    @staticmethod
    def authenticate_admin(session_token: str | None) -> int:
        """
        Raises:
            NotAuthenticatedException: see authenticate
            AdminRequiredException: caller is not in ADMIN_ID_LIST
        """
        user_id = UserService.authenticate(session_token)
        if not is_admin_user(user_id):
            raise AdminRequiredException(user_id)
        return user_id
