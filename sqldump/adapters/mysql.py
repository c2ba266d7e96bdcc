"""
MySQL / MariaDB adapter.
"""

import re
from typing import Any

from ..exceptions import DumpError
from ..utils import as_text
from .base import TypeAdapter

DEFINER_RE = r'DEFINER=`(?:[^`]|``)*`@`(?:[^`]|``)*`'

VIEW_RE = re.compile(
    r'^(CREATE(?:\s+ALGORITHM=(?:UNDEFINED|MERGE|TEMPTABLE))?)\s+('
    + DEFINER_RE
    + r'(?:\s+SQL SECURITY (?:DEFINER|INVOKER))?)?\s+(VIEW .+)$'
)
TRIGGER_RE = re.compile(r'^(CREATE)\s+(' + DEFINER_RE + r')?\s+(TRIGGER\s.*)$', re.DOTALL)
PROCEDURE_RE = re.compile(r'^(CREATE)\s+(' + DEFINER_RE + r')?\s+(PROCEDURE\s.*)$', re.DOTALL)
FUNCTION_RE = re.compile(r'^(CREATE)\s+(' + DEFINER_RE + r')?\s+(FUNCTION\s.*)$', re.DOTALL)
EVENT_RE = re.compile(r'^(CREATE)\s+(' + DEFINER_RE + r')?\s+(EVENT .*)$')
AUTO_INCREMENT_RE = re.compile(r'AUTO_INCREMENT=[0-9]+', re.DOTALL)

NUMERICAL_TYPES = frozenset([
    'bit', 'tinyint', 'smallint', 'mediumint', 'int', 'integer', 'bigint',
    'real', 'double', 'float', 'decimal', 'numeric',
])

BLOB_TYPES = frozenset([
    'tinyblob', 'blob', 'mediumblob', 'longblob', 'binary', 'varbinary', 'bit',
    'geometry', 'point', 'linestring', 'polygon', 'multipoint',
    'multilinestring', 'multipolygon', 'geometrycollection',
])


def _require(row: dict[str, Any], key: str, what: str) -> str:
    if key not in row:
        raise DumpError(f"Error getting {what} code, unknown output")
    return row[key]


class TypeAdapterMysql(TypeAdapter):
    """SQL text for MySQL-compatible servers."""

    def _database_charset(self) -> tuple[str, str]:
        character_set = self.connection.fetch_all("SHOW VARIABLES LIKE 'character_set_database'")[0]['Value']
        collation = self.connection.fetch_all("SHOW VARIABLES LIKE 'collation_database'")[0]['Value']
        return character_set, collation

    def create_database(self, database_name: str) -> str:
        character_set, collation = self._database_charset()
        return (
            f"CREATE DATABASE /*!32312 IF NOT EXISTS*/ `{database_name}`"
            f" /*!40100 DEFAULT CHARACTER SET {character_set}  COLLATE {collation} */;\n\n"
            f"USE `{database_name}`;\n\n"
        )

    def drop_database(self, database_name: str) -> str:
        return f"/*!40000 DROP DATABASE IF EXISTS `{database_name}`*/;\n"

    def get_database_header(self, database_name: str) -> str:
        return f"--\n-- Current Database: `{database_name}`\n--\n\n"

    def show_tables(self, database_name: str) -> str:
        return (
            "SELECT TABLE_NAME AS tbl_name FROM INFORMATION_SCHEMA.TABLES "
            f"WHERE TABLE_TYPE='BASE TABLE' AND TABLE_SCHEMA='{database_name}' ORDER BY TABLE_NAME"
        )

    def show_views(self, database_name: str) -> str:
        return (
            "SELECT TABLE_NAME AS tbl_name FROM INFORMATION_SCHEMA.TABLES "
            f"WHERE TABLE_TYPE='VIEW' AND TABLE_SCHEMA='{database_name}' ORDER BY TABLE_NAME"
        )

    def show_triggers(self, database_name: str) -> str:
        return f"SHOW TRIGGERS FROM `{database_name}`"

    def show_procedures(self, database_name: str) -> str:
        return (
            "SELECT SPECIFIC_NAME AS procedure_name FROM INFORMATION_SCHEMA.ROUTINES "
            f"WHERE ROUTINE_TYPE='PROCEDURE' AND ROUTINE_SCHEMA='{database_name}'"
        )

    def show_functions(self, database_name: str) -> str:
        return (
            "SELECT SPECIFIC_NAME AS function_name FROM INFORMATION_SCHEMA.ROUTINES "
            f"WHERE ROUTINE_TYPE='FUNCTION' AND ROUTINE_SCHEMA='{database_name}'"
        )

    def show_events(self, database_name: str) -> str:
        return (
            "SELECT EVENT_NAME AS event_name FROM INFORMATION_SCHEMA.EVENTS "
            f"WHERE EVENT_SCHEMA='{database_name}'"
        )

    def show_columns(self, table_name: str) -> str:
        return f"SHOW COLUMNS FROM `{table_name}`"

    def show_create_table(self, table_name: str) -> str:
        return f"SHOW CREATE TABLE `{table_name}`"

    def show_create_view(self, view_name: str) -> str:
        return f"SHOW CREATE VIEW `{view_name}`"

    def show_create_trigger(self, trigger_name: str) -> str:
        return f"SHOW CREATE TRIGGER `{trigger_name}`"

    def show_create_procedure(self, procedure_name: str) -> str:
        return f"SHOW CREATE PROCEDURE `{procedure_name}`"

    def show_create_function(self, function_name: str) -> str:
        return f"SHOW CREATE FUNCTION `{function_name}`"

    def show_create_event(self, event_name: str) -> str:
        return f"SHOW CREATE EVENT `{event_name}`"

    def create_table(self, row: dict[str, Any]) -> str:
        create_table = _require(row, 'Create Table', 'table')

        if self.settings.is_enabled('reset-auto-increment'):
            create_table = AUTO_INCREMENT_RE.sub('', create_table)

        if self.settings.is_enabled('if-not-exists'):
            create_table = re.sub(r'^CREATE TABLE', 'CREATE TABLE IF NOT EXISTS', create_table)

        charset = self.settings.get_default_character_set()
        return (
            "/*!40101 SET @saved_cs_client     = @@character_set_client */;\n"
            f"/*!40101 SET character_set_client = {charset} */;\n"
            f"{create_table};\n"
            "/*!40101 SET character_set_client = @saved_cs_client */;\n"
            "\n"
        )

    def create_view(self, row: dict[str, Any]) -> str:
        view_stmt = _require(row, 'Create View', 'view')
        definer = '' if self.settings.skip_definer() else '/*!50013 \\g<2> */\n'
        view_stmt = VIEW_RE.sub(
            '/*!50001 \\g<1> */\n' + definer + '/*!50001 \\g<3> */',
            view_stmt,
            count=1,
        )
        return f"{view_stmt};\n\n"

    def create_trigger(self, row: dict[str, Any]) -> str:
        trigger_stmt = _require(row, 'SQL Original Statement', 'trigger')
        definer = '' if self.settings.skip_definer() else '/*!50017 \\g<2>*/ '
        trigger_stmt = TRIGGER_RE.sub(
            '/*!50003 \\g<1>*/ ' + definer + '/*!50003 \\g<3> */',
            trigger_stmt,
            count=1,
        )
        return (
            "DELIMITER ;;\n"
            f"{trigger_stmt};;\n"
            "DELIMITER ;\n\n"
        )

    def create_procedure(self, row: dict[str, Any]) -> str:
        procedure_stmt = _require(row, 'Create Procedure', 'procedure')
        if self.settings.skip_definer():
            procedure_stmt = PROCEDURE_RE.sub('\\g<1> \\g<3>', procedure_stmt, count=1)

        charset = self.settings.get_default_character_set()
        return (
            f"/*!50003 DROP PROCEDURE IF EXISTS `{row['Procedure']}` */;\n"
            "/*!40101 SET @saved_cs_client     = @@character_set_client */;\n"
            f"/*!40101 SET character_set_client = {charset} */;\n"
            "DELIMITER ;;\n"
            f"{procedure_stmt} ;;\n"
            "DELIMITER ;\n"
            "/*!40101 SET character_set_client = @saved_cs_client */;\n\n"
        )

    def create_function(self, row: dict[str, Any]) -> str:
        function_stmt = _require(row, 'Create Function', 'function')
        if self.settings.skip_definer():
            function_stmt = FUNCTION_RE.sub('\\g<1> \\g<3>', function_stmt, count=1)

        character_set_client = row.get('character_set_client', self.settings.get_default_character_set())
        collation_connection = row.get('collation_connection', '')
        sql_mode = row.get('sql_mode', '')
        return (
            f"/*!50003 DROP FUNCTION IF EXISTS `{row['Function']}` */;\n"
            "/*!40101 SET @saved_cs_client     = @@character_set_client */;\n"
            "/*!50003 SET @saved_cs_results     = @@character_set_results */ ;\n"
            "/*!50003 SET @saved_col_connection = @@collation_connection */ ;\n"
            f"/*!40101 SET character_set_client = {character_set_client} */;\n"
            f"/*!40101 SET character_set_results = {character_set_client} */;\n"
            f"/*!50003 SET collation_connection  = {collation_connection} */ ;\n"
            "/*!50003 SET @saved_sql_mode       = @@sql_mode */ ;;\n"
            f"/*!50003 SET sql_mode              = '{sql_mode}' */ ;;\n"
            "/*!50003 SET @saved_time_zone      = @@time_zone */ ;;\n"
            "/*!50003 SET time_zone             = 'SYSTEM' */ ;;\n"
            "DELIMITER ;;\n"
            f"{function_stmt} ;;\n"
            "DELIMITER ;\n"
            "/*!50003 SET sql_mode              = @saved_sql_mode */ ;\n"
            "/*!50003 SET character_set_client  = @saved_cs_client */ ;\n"
            "/*!50003 SET character_set_results = @saved_cs_results */ ;\n"
            "/*!50003 SET collation_connection  = @saved_col_connection */ ;\n"
            "/*!50106 SET TIME_ZONE= @saved_time_zone */ ;\n\n"
        )

    def create_event(self, row: dict[str, Any]) -> str:
        event_stmt = _require(row, 'Create Event', 'event')
        sql_mode = row.get('sql_mode', '')
        definer = '' if self.settings.skip_definer() else '/*!50117 \\g<2>*/ '
        event_stmt = EVENT_RE.sub(
            '/*!50106 \\g<1>*/ ' + definer + '/*!50106 \\g<3> */',
            event_stmt,
            count=1,
        )
        return (
            "/*!50106 SET @save_time_zone= @@TIME_ZONE */ ;\n"
            f"/*!50106 DROP EVENT IF EXISTS `{row['Event']}` */;\n"
            "DELIMITER ;;\n"
            "/*!50003 SET @saved_cs_client      = @@character_set_client */ ;;\n"
            "/*!50003 SET @saved_cs_results     = @@character_set_results */ ;;\n"
            "/*!50003 SET @saved_col_connection = @@collation_connection */ ;;\n"
            "/*!50003 SET character_set_client  = utf8 */ ;;\n"
            "/*!50003 SET character_set_results = utf8 */ ;;\n"
            "/*!50003 SET collation_connection  = utf8_general_ci */ ;;\n"
            "/*!50003 SET @saved_sql_mode       = @@sql_mode */ ;;\n"
            f"/*!50003 SET sql_mode              = '{sql_mode}' */ ;;\n"
            "/*!50003 SET @saved_time_zone      = @@time_zone */ ;;\n"
            "/*!50003 SET time_zone             = 'SYSTEM' */ ;;\n"
            f"{event_stmt} ;;\n"
            "/*!50003 SET time_zone             = @saved_time_zone */ ;;\n"
            "/*!50003 SET sql_mode              = @saved_sql_mode */ ;;\n"
            "/*!50003 SET character_set_client  = @saved_cs_client */ ;;\n"
            "/*!50003 SET character_set_results = @saved_cs_results */ ;;\n"
            "/*!50003 SET collation_connection  = @saved_col_connection */ ;;\n"
            "DELIMITER ;\n"
            "/*!50106 SET TIME_ZONE= @save_time_zone */ ;\n\n"
        )

    def drop_table(self, table_name: str) -> str:
        return f"DROP TABLE IF EXISTS `{table_name}`;\n"

    def drop_view(self, view_name: str) -> str:
        return (
            f"DROP TABLE IF EXISTS `{view_name}`;\n"
            f"/*!50001 DROP VIEW IF EXISTS `{view_name}`*/;\n"
        )

    def drop_trigger(self, trigger_name: str) -> str:
        return f"DROP TRIGGER IF EXISTS `{trigger_name}`;\n"

    def setup_transaction(self) -> str:
        return "SET SESSION TRANSACTION ISOLATION LEVEL REPEATABLE READ"

    def start_transaction(self) -> str:
        return "START TRANSACTION /*!40100 WITH CONSISTENT SNAPSHOT */"

    def commit_transaction(self) -> str:
        return "COMMIT"

    def lock_table(self, table_name: str) -> None:
        self.connection.exec(f"LOCK TABLES `{table_name}` READ LOCAL")

    def unlock_table(self, table_name: str) -> None:
        self.connection.exec("UNLOCK TABLES")

    def start_add_lock_table(self, table_name: str) -> str:
        return f"LOCK TABLES `{table_name}` WRITE;\n"

    def end_add_lock_table(self, table_name: str) -> str:
        return "UNLOCK TABLES;\n"

    def start_add_disable_keys(self, table_name: str) -> str:
        return f"/*!40000 ALTER TABLE `{table_name}` DISABLE KEYS */;\n"

    def end_add_disable_keys(self, table_name: str) -> str:
        return f"/*!40000 ALTER TABLE `{table_name}` ENABLE KEYS */;\n"

    def start_disable_autocommit(self) -> str:
        return "SET autocommit=0;\n"

    def end_disable_autocommit(self) -> str:
        return "COMMIT;\n"

    def backup_parameters(self) -> str:
        charset = self.settings.get_default_character_set()
        lines = [
            "/*!40101 SET @OLD_CHARACTER_SET_CLIENT=@@CHARACTER_SET_CLIENT */;",
            "/*!40101 SET @OLD_CHARACTER_SET_RESULTS=@@CHARACTER_SET_RESULTS */;",
            "/*!40101 SET @OLD_COLLATION_CONNECTION=@@COLLATION_CONNECTION */;",
            f"/*!40101 SET NAMES {charset} */;",
        ]
        if not self.settings.skip_tz_utc():
            lines.append("/*!40103 SET @OLD_TIME_ZONE=@@TIME_ZONE */;")
            lines.append("/*!40103 SET TIME_ZONE='+00:00' */;")
        if self.settings.is_enabled('no-autocommit'):
            lines.append("/*!40101 SET @OLD_AUTOCOMMIT=@@AUTOCOMMIT */;")
        lines += [
            "/*!40014 SET @OLD_UNIQUE_CHECKS=@@UNIQUE_CHECKS, UNIQUE_CHECKS=0 */;",
            "/*!40014 SET @OLD_FOREIGN_KEY_CHECKS=@@FOREIGN_KEY_CHECKS, FOREIGN_KEY_CHECKS=0 */;",
            "/*!40101 SET @OLD_SQL_MODE=@@SQL_MODE, SQL_MODE='NO_AUTO_VALUE_ON_ZERO' */;",
            "/*!40111 SET @OLD_SQL_NOTES=@@SQL_NOTES, SQL_NOTES=0 */;",
        ]
        return '\n'.join(lines) + '\n\n'

    def restore_parameters(self) -> str:
        lines = []
        if not self.settings.skip_tz_utc():
            lines.append("/*!40103 SET TIME_ZONE=@OLD_TIME_ZONE */;")
        if self.settings.is_enabled('no-autocommit'):
            lines.append("/*!40101 SET AUTOCOMMIT=@OLD_AUTOCOMMIT */;")
        lines += [
            "/*!40101 SET SQL_MODE=@OLD_SQL_MODE */;",
            "/*!40014 SET FOREIGN_KEY_CHECKS=@OLD_FOREIGN_KEY_CHECKS */;",
            "/*!40014 SET UNIQUE_CHECKS=@OLD_UNIQUE_CHECKS */;",
            "/*!40101 SET CHARACTER_SET_CLIENT=@OLD_CHARACTER_SET_CLIENT */;",
            "/*!40101 SET CHARACTER_SET_RESULTS=@OLD_CHARACTER_SET_RESULTS */;",
            "/*!40101 SET COLLATION_CONNECTION=@OLD_COLLATION_CONNECTION */;",
            "/*!40111 SET SQL_NOTES=@OLD_SQL_NOTES */;",
        ]
        return '\n'.join(lines) + '\n\n'

    def parse_column_type(self, column: dict[str, Any]) -> dict[str, Any]:
        """Classify a SHOW COLUMNS row.

        ``int(11) unsigned`` yields type 'int', length '11' and attributes
        'unsigned'. Generated columns report "VIRTUAL GENERATED" or
        "STORED GENERATED" in Extra.
        """
        parts = as_text(column['Type']).split(' ')
        info: dict[str, Any] = {}

        paren = parts[0].find('(')
        if paren > 0:
            info['type'] = parts[0][:paren].lower()
            info['length'] = parts[0][paren + 1:].replace(')', '')
            info['attributes'] = parts[1] if len(parts) > 1 else None
        else:
            info['type'] = parts[0].lower()

        extra = as_text(column.get('Extra') or '')
        info['is_numeric'] = info['type'] in NUMERICAL_TYPES
        info['is_blob'] = info['type'] in BLOB_TYPES
        info['is_virtual'] = 'VIRTUAL GENERATED' in extra or 'STORED GENERATED' in extra
        return info

    def get_version(self) -> str:
        return self.connection.get_server_version()
