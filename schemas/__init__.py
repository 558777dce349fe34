# Schemas package
from .auth import RegisterRequest, LoginRequest, LoginResponse, EmailRequest, ResetPasswordRequest, DeleteAccountRequest
from .profile import EnterDataRequest, ChangeUsernameRequest, ProfileResponse, ProfileImageResponse
from .posts import PostCreate, PostResponse, CommentCreate, CommentResponse, LikeResponse, FlagResponse
from .content import Video, VideoResponse, Tip, Contest, NotificationRequest, SavedResponse
from .shared import UsernameRequest, MessageResponse
