"""
User REST API routes: profile, assistant customization, ask-to-assistant.
"""

import logging
import tempfile
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from virtual_assistant.accounts import AccountStore, MediaUploader, Profile, UnknownAccountError
from virtual_assistant.classifier import IntentClassifier
from virtual_assistant.config import Config
from virtual_assistant.core.router import RejectedIntent, route
from virtual_assistant.server.deps import (
    current_user_id,
    get_app_config,
    get_classifier,
    get_store,
    get_uploader,
)
from virtual_assistant.server.schemas import AskRequest, AskResponse, UpdateAssistantRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    # Ask-route errors carry a speakable "response" like successful replies
    return JSONResponse(status_code=status_code, content={"response": message})


@router.get("/current", response_model=Profile)
def get_current_user(
    user_id: str = Depends(current_user_id),
    store: AccountStore = Depends(get_store),
) -> Profile:
    """Get the signed-in user's profile."""
    account = store.get(user_id)
    if account is None:
        raise HTTPException(status_code=404, detail="User not found")
    return account.to_profile()


@router.post("/update", response_model=Profile)
def update_assistant(
    request: UpdateAssistantRequest,
    user_id: str = Depends(current_user_id),
    store: AccountStore = Depends(get_store),
) -> Profile:
    """Update assistant name and/or image URL."""
    try:
        account = store.update_assistant(
            user_id,
            assistant_name=request.assistantName,
            assistant_image=request.assistantImage,
        )
    except UnknownAccountError:
        raise HTTPException(status_code=404, detail="User not found")
    return account.to_profile()


@router.post("/customize", response_model=Profile)
async def customize_assistant(
    assistantName: str | None = Form(None),
    imageUrl: str | None = Form(None),
    assistantImage: UploadFile | None = File(None),
    user_id: str = Depends(current_user_id),
    store: AccountStore = Depends(get_store),
    uploader: MediaUploader = Depends(get_uploader),
    config: Config = Depends(get_app_config),
) -> Profile:
    """
    Update assistant name and image from a multipart form.

    An uploaded ``assistantImage`` file is sent to the media host; otherwise
    ``imageUrl`` (e.g. one of the preset images) is stored as is.
    """
    final_image = imageUrl

    if assistantImage is not None and assistantImage.filename:
        upload_dir = config.storage.upload_dir
        upload_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=upload_dir,
            suffix=Path(assistantImage.filename).suffix,
            delete=False,
        ) as tmp:
            tmp.write(await assistantImage.read())
            tmp_path = Path(tmp.name)

        # Uploader removes the temp file in every case
        uploaded = uploader.upload(tmp_path)
        if uploaded:
            final_image = uploaded
        else:
            logger.warning("Image upload failed for user %s; keeping previous image", user_id)

    try:
        account = store.update_assistant(
            user_id,
            assistant_name=assistantName,
            assistant_image=final_image,
        )
    except UnknownAccountError:
        raise HTTPException(status_code=404, detail="User not found")
    return account.to_profile()


@router.post("/asktoassistant", response_model=AskResponse)
def ask_to_assistant(
    request: AskRequest,
    user_id: str = Depends(current_user_id),
    store: AccountStore = Depends(get_store),
    classifier: IntentClassifier = Depends(get_classifier),
):
    """
    Classify and route a command.

    The command is recorded in the user's history before classification.
    Unknown command types are rejected with 400.
    """
    command = (request.command or "").strip()
    if not command:
        return _error(400, "Command missing")

    try:
        account = store.append_history(user_id, command)
    except UnknownAccountError:
        return _error(404, "User not found")

    try:
        record = classifier.classify(
            command,
            assistant_name=account.assistant_name or "Assistant",
            user_name=account.name or "User",
        )
        result = route(record)
    except Exception:
        logger.exception("Ask-to-assistant failed")
        return _error(500, "Server error while processing request.")

    if isinstance(result, RejectedIntent):
        return _error(400, "Unknown command type.")

    return AskResponse(**result.to_payload())
