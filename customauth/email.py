from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.mail import send_mail


async def send_email(email, subject, message):
    """
    Send a plain-text email through the configured backend (SMTP in
    deployment, locmem in tests). Raises on delivery failure.
    """
    await sync_to_async(send_mail)(
        subject,
        message,
        settings.DEFAULT_FROM_EMAIL,
        [email],
        fail_silently=False,
    )


def password_reset_message(reset_url):
    return (
        "Forgot your password? Submit a PATCH request with your new password and "
        f"passwordConfirm to: {reset_url}\n"
        "If you didn't forget your password, please ignore this email!"
    )
