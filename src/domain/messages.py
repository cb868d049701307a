"""
Message catalog - Fixed, human-readable messages returned to clients.
"""

# Registration
PASSWORD_MISMATCH = "Password and password confirmation do not match"
EMAIL_TAKEN = "Email is already registered"
NICKNAME_TAKEN = "Nickname is already in use"
RESTORE_REQUIRED = "This account was deleted; restore it to sign up again"
PASSWORD_TOO_LONG = "Password must be at most 72 bytes"

# Verification
NO_PENDING_VERIFICATION = "No pending verification for this email"
WRONG_CODE = "Verification code does not match"

# Login / session
NO_SUCH_ACCOUNT = "No account exists for this email"
WRONG_CREDENTIALS = "Wrong email or password"
EMAIL_NOT_VERIFIED = "Email has not been verified yet"
INVALID_TOKEN = "Invalid or expired token"

# Downstream
NOTIFICATION_SEND_FAILED = "Failed to send the verification email"
STORAGE_ERROR = "Unexpected storage error"
