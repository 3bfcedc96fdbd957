# src/flexpro/auth/__init__.py

from .deps import (  # role-based route dependencies
    AuthError,
    get_current_user,
    require_admin,
    require_faculty,
    require_role,
    require_student,
    require_user,
)
