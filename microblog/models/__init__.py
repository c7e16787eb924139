from microblog.models.activitypub import AccountKey, Base, Post

__all__ = ["AccountKey", "Base", "Post"]
