"""Plugin orchestration: pick one action from the configuration and run it."""

from __future__ import annotations

import logging
from enum import Enum

from prcomment_core.backends import BackendHandle, new_backend
from prcomment_core.batch import load_review_batch
from prcomment_core.config import PluginConfig, mask_token
from prcomment_core.errors import ConfigError, NoActionError
from prcomment_core.models import StatusRequest

logger = logging.getLogger(__name__)


class Action(str, Enum):
    BATCH = "batch"
    STATUS = "status"
    INLINE = "inline"
    COMMENT = "comment"


class Plugin:
    """Runs exactly one action per invocation.

    The backend is built on first use, so a dry run never constructs a
    client or touches the network.
    """

    def __init__(self, config: PluginConfig, log: logging.Logger | None = None, backend: BackendHandle | None = None):
        self.config = config
        self.log = log or logger
        self._backend = backend

    @property
    def backend(self) -> BackendHandle:
        if self._backend is None:
            self._backend = new_backend(self.config, log=self.log)
        return self._backend

    def select_action(self) -> Action | None:
        """Return the configured action; the first match in priority order wins."""
        cfg = self.config
        if cfg.comments_file:
            return Action.BATCH
        if cfg.status_state:
            return Action.STATUS
        if cfg.file_path and cfg.line > 0:
            return Action.INLINE
        if cfg.comment_body:
            return Action.COMMENT
        return None

    def execute(self) -> None:
        cfg = self.config
        self.log.info(
            "Executing comment plugin: provider=%s endpoint=%s repo=%s pr=%s commit=%s token=%s",
            cfg.scm_provider,
            cfg.scm_endpoint,
            cfg.repo,
            cfg.pr_number,
            cfg.commit_sha,
            mask_token(cfg.token),
        )
        action = self.select_action()

        if cfg.dry_run:
            self.log.info("Dry run - would perform %s action", action.value if action else "no")
            if cfg.comment_body:
                self.log.info("Dry run - would post comment: %s", cfg.comment_body)
            return

        if action is None:
            raise NoActionError("no action: provide COMMENT_BODY, FILE_PATH+LINE, COMMENTS_FILE, or STATUS_STATE")

        handlers = {
            Action.BATCH: self._create_comments_from_file,
            Action.STATUS: self._create_status,
            Action.INLINE: self._create_inline_comment,
            Action.COMMENT: self._create_comment,
        }
        try:
            handlers[action]()
        finally:
            if self._backend is not None:
                self._backend.close()

    def _require_pr_number(self) -> None:
        if self.config.pr_number <= 0:
            raise ConfigError("PR_NUMBER is required")

    def _create_comments_from_file(self) -> None:
        self._require_pr_number()
        reviews = load_review_batch(self.config.comments_file, log=self.log)
        if not reviews:
            return
        self.backend.post_batch(self.config.repo, self.config.pr_number, reviews, self.config.commit_sha)

    def _create_status(self) -> None:
        if not self.config.commit_sha:
            raise ConfigError("COMMIT_SHA is required")
        status = StatusRequest(
            commit_sha=self.config.commit_sha,
            state=self.config.status_state,
            context=self.config.status_context,
            description=self.config.status_desc,
            target_url=self.config.status_url,
        )
        self.backend.post_status(self.config.repo, status)

    def _create_inline_comment(self) -> None:
        self._require_pr_number()
        if not self.config.comment_body:
            raise ConfigError("COMMENT_BODY is required")
        self.backend.post_inline_comment(
            self.config.repo,
            self.config.pr_number,
            self.config.file_path,
            self.config.line,
            self.config.comment_body,
            self.config.commit_sha,
        )

    def _create_comment(self) -> None:
        self._require_pr_number()
        self.backend.post_comment(self.config.repo, self.config.pr_number, self.config.comment_body)
