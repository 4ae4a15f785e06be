"""Account Vault Meta information.
   Account Vault protects third-party account credentials behind a
   single password-gated operator login.
"""
__title__ = 'account_vault'
__description__ = (
   'Account Vault protects stored account credentials with field-level '
   'encryption and a single password-gated operator session.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2024 Account Vault contributors'
__author__ = 'Account Vault contributors'
__author_email__ = 'maintainers@account-vault.dev'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/account-vault/account-vault'
