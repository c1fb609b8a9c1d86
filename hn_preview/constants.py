"""
Constants and configuration defaults for HN Preview.
"""

# Remote API
HN_API_BASE = "https://hacker-news.firebaseio.com/v0"
TOP_STORIES_PATH = "topstories.json"
ITEM_PATH_TEMPLATE = "item/{id}.json"

# HTTP
HTTP_TIMEOUT = 15.0
HTTP_CONNECT_TIMEOUT = 10.0
USER_AGENT = "hn-preview/0.1"

# Story list
TOP_STORY_COUNT = 5

# Comment tree
MAX_COMMENT_DEPTH = 4  # Levels below the root comment

# Display
TIME_DISPLAY_FORMAT = "%Y-%m-%d %H:%M"
