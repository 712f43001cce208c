# app/lambdas/posts_api/errors.py


class PostsApiError(Exception):
    """Base class for failures raised by the posts handlers."""


class InvalidInput(PostsApiError):
    pass


class ParseError(PostsApiError):
    pass


class StorageError(PostsApiError):
    pass


class ConfigurationError(PostsApiError):
    pass
