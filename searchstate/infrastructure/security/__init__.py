from searchstate.infrastructure.security.jwt import issue_token, token_subject

__all__ = ["issue_token", "token_subject"]
