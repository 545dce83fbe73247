"""Navigator Launcher Meta information.
   Navigator Launcher keeps a service locked until an operator unlocks its
   encrypted secrets over a web prompt.
"""
__title__ = 'navigator_launcher'
__description__ = (
   'Navigator Launcher gates service startup behind a password-protected '
   'encrypted secrets vault.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-launcher'
