from fastapi import Header, HTTPException, Request
from jose import jwt


def verify_token(request: Request, authorization: str = Header(...)):
    """Event deliveries carry a bearer JWT signed with the shared event secret."""
    secret = request.app.state.services.settings.event_secret
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer":
            raise ValueError("Unsupported authorization scheme")
        jwt.decode(token, secret, algorithms=["HS256"])
    except Exception:
        raise HTTPException(status_code=401, detail="Invalid or missing token")
