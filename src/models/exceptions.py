import httpx


class ComposeError(Exception):
    """Base class for exceptions in this module."""
    pass

class ComposeRequestError(ComposeError):
    """Raised when the API returns a non-successful HTTP status code."""
    def __init__(self, status_code: int, response_text: str):
        self.status_code = status_code
        self.response_text = response_text
        super().__init__(f"API retornou um erro {status_code}: {response_text}")

class ComposeParseError(ComposeError):
    """Raised when response JSON parsing fails"""
    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"Não foi possível interpretar a resposta como JSON. Status: {response.status_code}")

class ComposeResponseError(ComposeError):
    """Raised when the response JSON does not have the expected structure"""
    pass

class NotAuthenticatedError(ComposeError):
    """Raised when an operation is attempted before a token was provided."""
    def __init__(self):
        super().__init__("É preciso estar autenticado na Compose para gerenciar a whitelist.")

class WhitelistWriteError(ComposeError):
    """Raised when adding or deleting a whitelist entry fails on the remote side."""
    def __init__(self, action: str, original_exception: Exception):
        self.action = action
        self.original_exception = original_exception
        super().__init__(f"Erro ao {action} entrada da whitelist: {original_exception}")

class WhitelistReadError(ComposeError):
    """Raised when the whitelist listing could not be retrieved."""
    def __init__(self, deployment_id: str, original_exception: Exception):
        self.deployment_id = deployment_id
        self.original_exception = original_exception
        super().__init__(
            f"Erro ao consultar a whitelist do deployment {deployment_id}: {original_exception}"
        )

class WhitelistEntryNotFoundError(ComposeError):
    """Raised when no entry of the deployment matches the requested key."""
    def __init__(self, deployment_id: str, key: str):
        self.deployment_id = deployment_id
        self.key = key
        super().__init__(f"Whitelist item not found: {key} (deployment {deployment_id})")

class InvalidImportIdError(ComposeError):
    """Raised when an import ID is not of the form <deployment>@<ip>."""
    def __init__(self, import_id: str):
        self.import_id = import_id
        super().__init__(
            f"ID de importação inválido '{import_id}'. Formato esperado: <deployment>@<ip>"
        )

class ReconciliationTimeoutError(ComposeError):
    """
    Raised when the whitelist never reached the expected state in time.

    This is distinct from WhitelistReadError: no listing failed. Either the
    target entry never showed (or never stopped showing), or the last listing
    was still running when the deadline passed.
    """
    def __init__(
        self,
        deployment_id: str,
        key: str,
        expected: str,
        attempts: int,
        elapsed: float,
    ):
        self.deployment_id = deployment_id
        self.key = key
        self.expected = expected
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(
            f"Tempo esgotado aguardando a entrada '{key}' do deployment {deployment_id} "
            f"ficar '{expected}' ({attempts} consultas em {elapsed:.1f}s)"
        )
