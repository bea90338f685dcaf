import os
from typing import Any

import pytest

from mcfmt.mcfmt_format import Formatter
from mcfmt.mcfmt_options import FormatOptions

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    # Nukes the teardown assertion that fails in act
    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


@pytest.fixture(scope="session")  # type: ignore[misc]
def formatter() -> Formatter:
    return Formatter(FormatOptions())


SAMPLE_PROGRAM = """\
using Toybox.WatchUi as Ui;
import Toybox.Lang;

module Utils {
    const MAX = 10;
}

(:background)
class App extends Ui.View {
    hidden var _count as Number = 0;
    private var names as Array<String>?;

    function initialize() {
        View.initialize();
    }

    // Update the counter.
    public function onUpdate(dc as Dc) as Void {
        if (_count > MAX) { return; }
        for (var i = 0; i < 3; i++) {
            _count += i;
        }
        var data = {"a" => 1, "b" => [1, 2, 3]b};
        switch (_count) {
            case 1:
                break;
            case instanceof Lang.Number:
                _count = 0;
                break;
            default:
                _count--;
        }
        try {
            dc.clear();
        } catch (e instanceof Lang.Exception) {
            System.println(e);
        } catch (e) {
            throw e;
        } finally {
            _count = 0;
        }
    }
}

enum Color { RED, GREEN = 2 }

typedef Callback as (Method(x as Number) as Void);
"""


@pytest.fixture  # type: ignore[misc]
def sample_program() -> str:
    return SAMPLE_PROGRAM
