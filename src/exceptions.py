from typing import Optional


class NewsDashboardError(Exception):
    pass


class ValidationError(NewsDashboardError):
    pass


class NotFoundError(NewsDashboardError):
    pass


class ScrapingError(NewsDashboardError):
    pass


class ScrapeTimeoutError(ScrapingError):
    pass


class ExternalServiceError(NewsDashboardError):
    pass


class ServiceNotConfiguredError(ExternalServiceError):
    pass


class LLMServiceError(ExternalServiceError):
    pass


class SocialPlatformError(ExternalServiceError):
    def __init__(self, message: str, platform: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message
        self.platform = platform
        self.status_code = status_code
        super().__init__(message)


class SocialAuthError(SocialPlatformError):
    pass
