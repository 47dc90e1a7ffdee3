"""User-facing messages for account operations."""

# Success
USER_REGISTERED = "User registered successfully"
EMAIL_VERIFIED = "Email verified successfully. You can now log in."
VERIFICATION_EMAIL_SENT = "Verification email sent"
PASSWORD_RESET_SENT = "Password reset link has been sent to your email."
PASSWORD_RESET_SUCCESS = "Password reset successful. You can now log in."
USER_UPDATED = "User updated successfully"
PASSWORD_CHANGED = "Password changed successfully"

# Errors
EMAIL_ALREADY_IN_USE = "Email already in use"
EMAIL_NOT_VERIFIED = "Email not verified. Please check your email and verify your account."
EMAIL_ALREADY_VERIFIED = "Email already verified"
INVALID_CREDENTIALS = "Invalid email or password"
INVALID_OR_EXPIRED_TOKEN = "Invalid or expired token"
USER_NOT_FOUND = "User not found"
INVALID_CURRENT_PASSWORD = "Invalid current password"
ACCOUNT_LOCKED = "Account locked due to too many failed login attempts. Try again in {minutes} minute(s)."
NOT_AUTHORIZED_NO_TOKEN = "Not authorized, no token"
NOT_AUTHORIZED_TOKEN_FAILED = "Not authorized, token failed"
SOMETHING_WENT_WRONG = "Something went wrong!"

# Outbound email
VERIFY_EMAIL_SUBJECT = "Verify your email"
VERIFY_EMAIL_BODY = '<p>Click <a href="{url}">here</a> to verify your account</p>'
RESET_PASSWORD_SUBJECT = "Reset your password"
RESET_PASSWORD_BODY = '<p>Click <a href="{url}">here</a> to reset your password.</p>'
