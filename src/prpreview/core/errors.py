class PRPreviewError(Exception):
    pass


class SelectorError(PRPreviewError, ValueError):
    pass


class AuthRequiredError(PRPreviewError):
    def __init__(self, host: str, message: str = "Authentication required"):
        super().__init__(message)
        self.host = host


class ProviderError(PRPreviewError):
    pass


class NoPendingReviewError(PRPreviewError):
    def __init__(self, viewer: str):
        super().__init__(f"no pending review found for {viewer}")
        self.viewer = viewer
