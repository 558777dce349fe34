import logging
import random
from fastapi import APIRouter, HTTPException, Depends
from schemas import RegisterRequest, LoginRequest, LoginResponse, EmailRequest, ResetPasswordRequest, DeleteAccountRequest, MessageResponse
from database import RealtimeStore, get_store
from identity import IdentityProvider, get_identity, UserNotFound, EmailAlreadyExists
from mail import Mailer, get_mailer, verification_email, reset_email, VERIFICATION_SUBJECT, RESET_SUBJECT
from auth import hash_password, verify_password, create_access_token, create_reset_token, verify_reset_token
from config import PROFILE_IMAGE_COUNT, PASSWORD_RESET_URL, RESET_TOKEN_EXPIRE_MINUTES
from utils.route_helpers import (
    remote_call, require_key, claim_owner, claim_unique, release_unique, ValueTaken, USERNAME_INDEX, PHONE_INDEX
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

def send_verification_email(identity: IdentityProvider, mailer: Mailer, email: str):
    with remote_call("Failed to send verification email"):
        link = identity.email_verification_link(email)
        mailer.send(email, VERIFICATION_SUBJECT, verification_email(link))

@router.post("/register", status_code=201)
def register(
    user: RegisterRequest,
    store: RealtimeStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity),
    mailer: Mailer = Depends(get_mailer),
):
    claims = [(USERNAME_INDEX, user.username, "Username"), (PHONE_INDEX, user.phone_number, "Phone number")]

    # Reject taken values before an identity record exists
    with remote_call("Failed to check username and phone number uniqueness"):
        for index, value, label in claims:
            if value and claim_owner(store, index, value) is not None:
                logger.warning("Registration refused, %s already taken: %s", label.lower(), value)
                raise HTTPException(status_code=409, detail=f"{label} already exists")

    try:
        with remote_call("Failed to create user"):
            uid = identity.create_user(user.email)
    except EmailAlreadyExists:
        raise HTTPException(status_code=409, detail="Email already exists")

    taken = []
    try:
        with remote_call("Failed to reserve username and phone number"):
            for index, value, label in claims:
                if value:
                    claim_unique(store, index, value, uid)
                    taken.append((index, value))
    except ValueTaken as e:
        # Lost a race for the value; undo this registration
        logger.warning("Registration of %s lost a uniqueness race for %s", user.email, e)
        with remote_call("Failed to roll back registration"):
            for index, value in taken:
                release_unique(store, index, value, uid)
            identity.delete_user(uid)
        label = "Username" if user.username == str(e) else "Phone number"
        raise HTTPException(status_code=409, detail=f"{label} already exists")

    record = {
        "email": user.email,
        "role": "user",
        "hashed_password": hash_password(user.password.strip()),
        "profile_image": random.randint(1, PROFILE_IMAGE_COUNT),
    }
    for field in ("username", "phone_number", "name", "gender"):
        value = getattr(user, field)
        if value:
            record[field] = value

    with remote_call("Failed to save user data"):
        store.set(f"users/{uid}", record)

    send_verification_email(identity, mailer, user.email)
    logger.info("Registered user %s", uid)
    return {"message": "User registered successfully", "uid": uid}

@router.post("/login", response_model=LoginResponse)
def login(login_data: LoginRequest, store: RealtimeStore = Depends(get_store), identity: IdentityProvider = Depends(get_identity)):
    try:
        with remote_call("Failed to look up user"):
            uid, verified = identity.lookup(login_data.email)
    except UserNotFound:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    with remote_call("Failed to retrieve user data"):
        record = store.get(f"users/{uid}")
    if not record or not record.get("hashed_password"):
        logger.error("User %s has no stored password", uid)
        raise HTTPException(status_code=500, detail="Failed to retrieve user password")

    if not verify_password(login_data.password.strip(), record["hashed_password"]):
        logger.warning("Rejected password for %s", uid)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not verified:
        raise HTTPException(status_code=401, detail="Email not verified")

    role = record.get("role")
    if not role:
        logger.error("User %s has no role", uid)
        raise HTTPException(status_code=500, detail="Failed to retrieve user role")

    return LoginResponse(
        uid=uid,
        role=role,
        username=record.get("username"),
        profile_image=record.get("profile_image"),
        access_token=create_access_token({"sub": uid}),
        token_type="bearer",
    )

@router.post("/forget-password", response_model=MessageResponse)
def forgot_password(req: EmailRequest, identity: IdentityProvider = Depends(get_identity), mailer: Mailer = Depends(get_mailer)):
    try:
        with remote_call("Failed to look up user"):
            uid, _ = identity.lookup(req.email)
    except UserNotFound:
        raise HTTPException(status_code=404, detail="User not found")

    link = f"{PASSWORD_RESET_URL}?token={create_reset_token(uid)}"
    with remote_call("Failed to send password reset email"):
        mailer.send(req.email, RESET_SUBJECT, reset_email(link, RESET_TOKEN_EXPIRE_MINUTES))
    return {"message": "Password reset email sent"}

@router.post("/reset-password", response_model=MessageResponse)
def reset_password(req: ResetPasswordRequest, store: RealtimeStore = Depends(get_store)):
    uid = verify_reset_token(req.token)
    if not uid:
        raise HTTPException(status_code=401, detail="Invalid or expired reset token")
    with remote_call("Failed to update password"):
        if store.get(f"users/{uid}") is None:
            raise HTTPException(status_code=404, detail="User not found")
        store.update(f"users/{uid}", {"hashed_password": hash_password(req.new_password.strip())})
    logger.info("Password reset for %s", uid)
    return {"message": "Password updated successfully"}

@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(req: EmailRequest, identity: IdentityProvider = Depends(get_identity), mailer: Mailer = Depends(get_mailer)):
    try:
        with remote_call("Failed to look up user"):
            _, verified = identity.lookup(req.email)
    except UserNotFound:
        raise HTTPException(status_code=404, detail="User not found")
    if verified:
        raise HTTPException(status_code=400, detail="Email already verified")
    send_verification_email(identity, mailer, req.email)
    return {"message": "Verification email sent"}

@router.post("/delete_account", response_model=MessageResponse)
def delete_account(
    req: DeleteAccountRequest,
    store: RealtimeStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity),
):
    require_key(req.uid, "user ID")
    with remote_call("Failed to retrieve user data"):
        record = store.get(f"users/{req.uid}") or {}

    try:
        with remote_call("Failed to delete user from authentication"):
            identity.delete_user(req.uid)
    except UserNotFound:
        raise HTTPException(status_code=404, detail="User not found")

    with remote_call("Failed to delete user data"):
        store.delete(f"users/{req.uid}")
        release_unique(store, USERNAME_INDEX, record.get("username"), req.uid)
        release_unique(store, PHONE_INDEX, record.get("phone_number"), req.uid)
    logger.info("Deleted account %s", req.uid)
    return {"message": "Account deleted successfully"}
