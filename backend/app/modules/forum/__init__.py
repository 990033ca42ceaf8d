"""
Forum Module - Q&A discussions.

Features:
- Ordered category listing
- Questions per category, newest first
- Question detail with answers, oldest first
"""

from app.modules.forum.service import ForumService

__all__ = ["ForumService"]
