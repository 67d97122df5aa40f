# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Discussion domain package.

Class discussion boards and per-submission feedback threads.
"""

from src.domains.discussion.service import (
    ClassNotFoundError,
    DiscussionAccessDeniedError,
    DiscussionService,
    DiscussionServiceError,
    SubmissionNotFoundError,
)

__all__ = [
    "DiscussionService",
    "DiscussionServiceError",
    "ClassNotFoundError",
    "SubmissionNotFoundError",
    "DiscussionAccessDeniedError",
]
