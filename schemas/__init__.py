# Schemas package
from .auth import SignupRequest, LoginRequest
from .users import UserUpdate
from .posts import LikeRequest, CommentCreate, DeleteRequest
