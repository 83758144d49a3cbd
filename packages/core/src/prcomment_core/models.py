"""Request and response models passed between the orchestrator and backends."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class PullRequestAnchor:
    """The commit pair a code comment is anchored to.

    ``target_sha`` is the merge-base on Harness Code and the base branch
    head on the generic backends.
    """

    source_sha: str
    target_sha: str


@dataclass
class CommentRequest:
    """One outbound pull request comment.

    A plain comment only carries ``text``; code comments also carry the file
    path, line range and both commit SHAs. ``parent_id`` threads a reply.
    """

    text: str
    path: str | None = None
    line_start: int | None = None
    line_end: int | None = None
    source_commit_sha: str | None = None
    target_commit_sha: str | None = None
    parent_id: int | None = None

    def to_payload(self) -> dict:
        # Unset fields are dropped rather than sent as zero values.
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class StatusRequest:
    commit_sha: str
    state: str
    context: str
    description: str
    target_url: str = ""


@dataclass
class ReviewItem:
    """A single entry of a batch reviews file."""

    file_path: str
    line_start: int
    line_end: int
    type: str
    review: str

    @classmethod
    def from_dict(cls, d: dict) -> ReviewItem:
        return cls(
            file_path=d.get("file_path", ""),
            line_start=int(d.get("line_number_start") or 0),
            line_end=int(d.get("line_number_end") or 0),
            type=d.get("type") or "",
            review=d.get("review") or "",
        )

    @property
    def text(self) -> str:
        return format_review_text(self.type, self.review)


def format_review_text(category: str | None, text: str) -> str:
    """Prefix a review body with its category in bold, e.g. ``**bug:** ...``."""
    if category:
        return f"**{category}:** {text}"
    return text
