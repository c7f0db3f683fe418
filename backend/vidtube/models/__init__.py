from vidtube.models.user import User
from vidtube.models.video import Video
from vidtube.models.comment import Comment
from vidtube.models.like import Like, Reaction
from vidtube.models.subscription import Subscription
from vidtube.models.playlist import Playlist, PlaylistVideo
from vidtube.models.watch_history import WatchHistory

__all__ = [
    "User", "Video", "Comment", "Like", "Reaction", "Subscription",
    "Playlist", "PlaylistVideo", "WatchHistory",
]
