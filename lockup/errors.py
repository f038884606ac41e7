class LockupError(Exception):
    code = "LOCKUP_ERROR"
    http_status = 400


class ConfigurationError(LockupError):
    code = "CONFIGURATION_ERROR"
    http_status = 500


class BelowMinimumContributionError(LockupError):
    code = "BELOW_MINIMUM_CONTRIBUTION"
    http_status = 400


class SaleInactiveError(LockupError):
    code = "SALE_INACTIVE"
    http_status = 409


class IndexOutOfRangeError(LockupError):
    code = "INDEX_OUT_OF_RANGE"
    http_status = 404


class TooEarlyError(LockupError):
    code = "TOO_EARLY"
    http_status = 409


class NothingToClaimError(LockupError):
    code = "NOTHING_TO_CLAIM"
    http_status = 409


class AlreadyFinishedError(LockupError):
    code = "ALREADY_FINISHED"
    http_status = 409


class ExceedsUnlockedBalanceError(LockupError):
    code = "EXCEEDS_UNLOCKED_BALANCE"
    http_status = 409


class UnauthorizedError(LockupError):
    code = "UNAUTHORIZED"
    http_status = 403


class SupplyCapExceededError(LockupError):
    code = "SUPPLY_CAP_EXCEEDED"
    http_status = 409


class InsufficientBalanceError(LockupError):
    code = "INSUFFICIENT_BALANCE"
    http_status = 409


class InsufficientAllowanceError(LockupError):
    code = "INSUFFICIENT_ALLOWANCE"
    http_status = 409


class FundingTransferError(LockupError):
    code = "FUNDING_TRANSFER_FAILED"
    http_status = 402


class ReentrancyError(LockupError):
    code = "REENTRANT_CALL"
    http_status = 409


class InvalidClaimUpdateError(LockupError):
    code = "INVALID_CLAIM_UPDATE"
    http_status = 500


class InvalidAmountError(LockupError):
    code = "INVALID_AMOUNT"
    http_status = 400
