from django.contrib.auth.hashers import BCryptSHA256PasswordHasher


class BCryptSHA256Cost10PasswordHasher(BCryptSHA256PasswordHasher):
    """
    bcrypt (sha256-prehashed) with a fixed cost factor of 10.
    """
    rounds = 10
