import httpx

from models.exceptions import ComposeError, ComposeRequestError

def get_friendly_error_msg(e: Exception) -> str:
    """
    Translates technical exceptions into user-friendly Portuguese messages.
    """
    # Network / Connection Errors
    if isinstance(e, httpx.ConnectTimeout):
        return "Tempo de conexão esgotado (Timeout)"

    if isinstance(e, httpx.ReadTimeout):
        return "O servidor Compose demorou muito para responder"

    if isinstance(e, httpx.ConnectError):
        # Often happens when internet is down or DNS fails
        return "Falha na conexão. Verifique sua internet"

    if isinstance(e, httpx.NetworkError):
        return "Erro de rede ou conexão instável"

    if isinstance(e, httpx.HTTPStatusError):
        return f"Erro no servidor (Código {e.response.status_code})"

    # API Errors
    if isinstance(e, ComposeRequestError):
        if e.status_code in (401, 403):
            return "Token da Compose inválido ou sem permissão"
        if e.status_code == 404:
            return "Deployment não encontrado na Compose"
        return f"Erro no servidor (Código {e.status_code})"

    if isinstance(e, ComposeError):
        return str(e)

    # Generic Fallback
    return f"Erro inesperado ({type(e).__name__})"
