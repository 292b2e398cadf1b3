# auth/__init__.py
from auth.models import User, UserStatus, UserType
from auth.security import verify_password, get_password_hash, create_access_token
from auth.dependencies import get_current_user, require_approved_user, require_budgetist
