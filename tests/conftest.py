"""Shared pytest fixtures for the CStyleIQ test suite."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from cstyleiq.config.settings import CStyleIQSettings
from cstyleiq.core.engine import CStyleIQEngine
from cstyleiq.core.registry import RuleRegistry, build_registry

GOOD_SOURCE = textwrap.dedent("""\
    /**
     * @file app_log.c
     * Logging helpers.
     */
    #include <stdio.h>
    #include <string.h>

    #include <cjson/cJSON.h>

    #include "app_log.h"

    #define LOG_BUFFER_SIZE 128
    #define MAX_LEVEL(a, b) ((a) > (b) ? (a) : (b))

    typedef enum LogLevel {
        LOG_LEVEL_DEBUG,
        LOG_LEVEL_INFO = 1,
        LOG_LEVEL_ERROR
    } LogLevel_t;

    struct LogEntry {
        int level;
        char strMessage[LOG_BUFFER_SIZE];
        unsigned int lineNumber;
    };

    static int logCount = 0;
    static char strLastMessage[LOG_BUFFER_SIZE];
    static int levelCountArr[3] = { 0, 0, 0 };

    static int clampLevel(int level)
    {
        if (level > LOG_LEVEL_ERROR) {
            return LOG_LEVEL_ERROR;
        }
        return level;
    }

    void logMessage(int level, const char *strText)
    {
        int currentLevel = clampLevel(level);
        struct LogEntry entry;

        entry.level = currentLevel;
        strncpy(entry.strMessage, strText, sizeof(entry.strMessage) - 1);
        strncpy(strLastMessage, strText, sizeof(strLastMessage) - 1);
        levelCountArr[currentLevel]++;
        logCount++;
        printf("[%d] %s\\n", entry.level, entry.strMessage);
    }

    int logTotal(void)
    {
        return logCount;
    }
""")

GOOD_HEADER = textwrap.dedent("""\
    #ifndef __APP_LOG_H__
    #define __APP_LOG_H__

    #include <stddef.h>

    typedef struct LogConfig {
        int minLevel;
        const char *strPrefix;
    } LogConfig_t;

    void logMessage(int level, const char *strText);
    int logTotal(void);

    #endif /* __APP_LOG_H__ */
""")

UNGUARDED_HEADER = textwrap.dedent("""\
    #include <stdio.h>

    void logMessage(int level, const char *strText);
""")

MISORDERED_INCLUDES = textwrap.dedent("""\
    #include <cjson/cJSON.h>
    #include <stdio.h>
    #include "app_log.h"

    int logTotal(void)
    {
        return 0;
    }
""")

VERB_LED_VARIABLE = "int runningDevice;\n"

BAD_SOURCE = textwrap.dedent("""\
    #include "app_log.h"
    #include <stdio.h>

    #define maxSize 10

    typedef int counter;

    enum color { red, GREEN };

    int GetValue(void) {
        return 1;
    }

    static int helper(void)
    {
        return 2;
    }

    char name[16];
    int values[4];
""")


@pytest.fixture
def default_settings() -> CStyleIQSettings:
    return CStyleIQSettings()


@pytest.fixture
def sequential_settings() -> CStyleIQSettings:
    return CStyleIQSettings(jobs=1)


@pytest.fixture
def registry(default_settings) -> RuleRegistry:
    return build_registry(default_settings)


@pytest.fixture
def engine(tmp_path: Path, default_settings) -> CStyleIQEngine:
    return CStyleIQEngine(settings=default_settings, root_dir=tmp_path)


@pytest.fixture
def tmp_c_project(tmp_path: Path) -> Path:
    src = tmp_path / "src"
    inc = tmp_path / "include"
    src.mkdir()
    inc.mkdir()
    (src / "app_log.c").write_text(GOOD_SOURCE)
    (inc / "app_log.h").write_text(GOOD_HEADER)
    (tmp_path / "README.md").write_text("# not C\n")
    return tmp_path


@pytest.fixture
def tmp_bad_project(tmp_c_project: Path) -> Path:
    (tmp_c_project / "src" / "device.c").write_text(VERB_LED_VARIABLE)
    (tmp_c_project / "include" / "broken.h").write_text(UNGUARDED_HEADER)
    return tmp_c_project
