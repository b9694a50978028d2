"""Realty Manager commands"""
from realty.commands.version_cmd import version
from realty.commands.help_cmd import help_cmd
from realty.commands.db_cmd import init_db
from realty.commands.analytics_cmd import report

__all__ = ['version', 'help_cmd', 'init_db', 'report']
