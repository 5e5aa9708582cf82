"""Blog content-store library."""

from blog.authoring import new_post, slugify
from blog.db import PostDB
from blog.errors import FormatError
from blog.parser import dump, parse, parse_identifier, parse_post
from blog.post import Post, PostId
from blog.store import ContentStore, PostListing

__all__ = [
    "ContentStore",
    "FormatError",
    "Post",
    "PostDB",
    "PostId",
    "PostListing",
    "dump",
    "new_post",
    "parse",
    "parse_identifier",
    "parse_post",
    "slugify",
]
