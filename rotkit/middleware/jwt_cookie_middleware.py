from django.utils.deprecation import MiddlewareMixin


class JWTAuthCookieMiddleware(MiddlewareMixin):
    """
    Lets browser clients authenticate with an httpOnly cookie instead of an
    Authorization header. An explicit header always wins over the cookie.
    """
    COOKIE_NAMES = ("access_token", "user-token", "admin-token")

    def process_request(self, request):
        if request.META.get("HTTP_AUTHORIZATION"):
            return None
        for name in self.COOKIE_NAMES:
            token = request.COOKIES.get(name)
            if token:
                request.META["HTTP_AUTHORIZATION"] = f"Bearer {token}"
                break
        return None
