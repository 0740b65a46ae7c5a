from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .user import User as User  # noqa: E402
from .autologin_token import AutologinToken as AutologinToken  # noqa: E402
