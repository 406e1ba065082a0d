from datetime import UTC, datetime
from html import escape


def render_password_reset_email(
    *,
    app_name: str,
    full_name: str,
    code: str,
    reset_link: str,
    valid_minutes: int,
) -> str:
    """HTML body of the password reset message"""
    app_name = escape(app_name)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Reset Password</title>
</head>
<body style="font-family: Arial, sans-serif; background-color: #f4f4f7; color: #51545e; margin: 0; padding: 0;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px; background-color: #ffffff; border-radius: 8px;">
    <div style="text-align: center; padding: 20px 0; border-bottom: 1px solid #eee;">
      <h1 style="margin: 0; color: #333; font-size: 24px;">{app_name}</h1>
    </div>
    <div style="padding: 30px 20px;">
      <p>Hi {escape(full_name)},</p>
      <p>You requested a password reset for your {app_name} account.</p>
      <p>Your reset code is <strong style="font-size: 20px; letter-spacing: 4px;">{escape(code)}</strong>.
         It is valid for <strong>{valid_minutes} minutes</strong> and can be used once.</p>
      <div style="text-align: center; margin-top: 20px;">
        <a href="{escape(reset_link, quote=True)}" style="display: inline-block; background-color: #007bff; color: #ffffff; padding: 12px 24px; text-decoration: none; border-radius: 5px; font-weight: bold;">Reset Password</a>
      </div>
      <p style="margin-top: 30px;">If you didn't ask to reset your password, you can safely ignore this email.</p>
    </div>
    <div style="text-align: center; padding: 20px; font-size: 12px; color: #6b6e76;">
      <p>&copy; {datetime.now(UTC).year} {app_name}. All rights reserved.</p>
    </div>
  </div>
</body>
</html>
"""
