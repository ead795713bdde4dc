
"""
Typed models used across services.
"""

from pydantic import BaseModel, ConfigDict, Field


class OCRResult(BaseModel):
    """
    Outcome of one image lookup. `text` is only set when `success` is True.
    """
    success: bool = False
    text: str | None = None


class ParsedResult(BaseModel):
    ParsedText: str = ""


class OCRResponse(BaseModel):
    """
    The JSON body returned by the OCR endpoint (only the fields we read).
    """
    IsErroredOnProcessing: bool
    ParsedResults: list[ParsedResult] | None = None


class Post(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    url: str | None = None
    body: str | None = None
    creator_id: int | None = None


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    post_id: int
    content: str = ""
    # Materialized reply path: "0.<ancestor ids...>.<own id>"
    path: str = "0"
    creator_id: int | None = None

    @property
    def parent_comment_id(self) -> int | None:
        """
        Id of the comment this one replies to, or None for a top-level comment.
          "0.12"       -> None (parent is the post)
          "0.12.34"    -> 12
        """
        ids = [p for p in self.path.split(".") if p and p != "0"]
        if len(ids) < 2:
            return None
        return int(ids[-2])


class AnnotatedBlock(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    text: str


class ReplyPayload(BaseModel):
    content: str
    post_id: int
    parent_id: int | None = None


class Mention(BaseModel):
    """
    An unread mention of the bot as delivered by the feed.
    """
    mention_id: int
    comment: Comment
    post: Post | None = Field(default=None)
