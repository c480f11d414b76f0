"""End-to-end tests for autoreg.orchestrator."""

from __future__ import annotations

import logging

import pytest

from autoreg.errors import AutoRegError
from autoreg.logging import configure_logging
from autoreg.orchestrator import Orchestrator
from autoreg.processors import AutoServiceProcessor
from tests._fixtures.project_builder import ProjectBuilder

_KEY = "org.springframework.boot.autoconfigure.EnableAutoConfiguration"

_API = """
package com.example;

public interface Api {
    void run();
}
"""

_FOO = """
package com.example;

import org.springframework.stereotype.Component;

@Component
public class Foo {}
"""

_MY_COMPONENT = """
package com.example;

import java.lang.annotation.*;
import org.springframework.stereotype.Component;

@Documented
@Retention(RetentionPolicy.RUNTIME)
@Target(ElementType.TYPE)
@Component
public @interface MyComponent {}
"""

_BAR = """
package com.example;

@MyComponent
public class Bar {}
"""

_IMPL = """
package com.example;

import com.codedream.auto.service.AutoService;

@AutoService(Api.class)
public class Impl implements Api {
    public void run() {}
}
"""

_BAD_IMPL = """
package com.example;

import com.codedream.auto.service.AutoService;

@AutoService(Api.class)
public class BadImpl {
    public void run() {}
}
"""


def _sample_project(builder: ProjectBuilder) -> None:
    builder.java(
        {
            "com/example/Api.java": _API,
            "com/example/Foo.java": _FOO,
            "com/example/MyComponent.java": _MY_COMPONENT,
            "com/example/Bar.java": _BAR,
            "com/example/Impl.java": _IMPL,
            "com/example/BadImpl.java": _BAD_IMPL,
        }
    )


def test_build_writes_both_registries(project_builder: ProjectBuilder) -> None:
    _sample_project(project_builder)

    outcome = Orchestrator().run_build(str(project_builder.path()))

    assert outcome.written == [
        "META-INF/spring.factories",
        "META-INF/services/com.example.Api",
    ]
    assert outcome.output_root == project_builder.path().resolve() / "target" / "classes"
    assert project_builder.read("target/classes/META-INF/spring.factories") == (
        f"{_KEY}=\\\ncom.example.Bar,\\\ncom.example.Foo\n"
    )
    assert project_builder.read("target/classes/META-INF/services/com.example.Api") == (
        "com.example.Impl\n"
    )


def test_build_excludes_non_implementing_service(project_builder: ProjectBuilder) -> None:
    project_builder.java({"com/example/Api.java": _API, "com/example/BadImpl.java": _BAD_IMPL})

    outcome = Orchestrator().run_build(str(project_builder.path()))

    assert outcome.written == []
    assert not (project_builder.path() / "target").exists()


def test_dry_run_returns_contents_without_writing(project_builder: ProjectBuilder) -> None:
    _sample_project(project_builder)

    outcome = Orchestrator().run_build(str(project_builder.path()), dry_run=True)

    assert outcome.dry_run is True
    assert outcome.contents["META-INF/services/com.example.Api"] == "com.example.Impl\n"
    assert outcome.contents["META-INF/spring.factories"].startswith(f"{_KEY}=\\\n")
    assert not (project_builder.path() / "target").exists()


def test_output_override(project_builder: ProjectBuilder, tmp_path) -> None:
    project_builder.java({"com/example/Foo.java": _FOO})
    output = tmp_path / "out"

    outcome = Orchestrator().run_build(str(project_builder.path()), output=str(output))

    assert outcome.output_root == output.resolve()
    assert (output / "META-INF" / "spring.factories").read_text(encoding="utf-8") == (
        f"{_KEY}=\\\ncom.example.Foo\n"
    )


def test_config_controls_sources_output_and_markers(project_builder: ProjectBuilder) -> None:
    project_builder.java({"com/example/Foo.java": _FOO}, source_root="src")
    project_builder.java(
        {
            "com/example/Listener.java": """
            package com.example;

            import com.example.events.EventListener;

            @EventListener
            public class Listener {}
            """
        },
        source_root="generated",
    )
    project_builder.write(
        {
            "stubs/events.yml": """
            declarations:
              - name: com.example.events.EventListener
                kind: annotation
            """,
            ".autoreg.yml": f"""
            sources: [src, generated]
            output_dir: build/resources/main
            classpath: [stubs/events.yml]
            markers:
              factories:
                - annotation: org.springframework.stereotype.Component
                  key: {_KEY}
                - annotation: com.example.events.EventListener
                  key: org.springframework.context.ApplicationListener
            """,
        }
    )

    Orchestrator().run_build(str(project_builder.path()))

    assert project_builder.read("build/resources/main/META-INF/spring.factories") == (
        f"{_KEY}=\\\ncom.example.Foo\n"
        "org.springframework.context.ApplicationListener=\\\ncom.example.Listener\n"
    )


def test_processor_override_limits_output(project_builder: ProjectBuilder) -> None:
    _sample_project(project_builder)

    outcome = Orchestrator(processors=[AutoServiceProcessor()]).run_build(
        str(project_builder.path()), dry_run=True
    )

    assert outcome.written == ["META-INF/services/com.example.Api"]


def test_empty_project_writes_nothing(project_builder: ProjectBuilder) -> None:
    outcome = Orchestrator().run_build(str(project_builder.path()))

    assert outcome.written == []
    assert outcome.contents == {}


def test_explain_reports_chain_and_contract_checks(project_builder: ProjectBuilder) -> None:
    _sample_project(project_builder)
    orchestrator = Orchestrator()

    bar = orchestrator.explain(str(project_builder.path()), "com.example.Bar")
    assert bar.kind == "class"
    assert bar.factories[_KEY] == (
        "com.example.MyComponent",
        "org.springframework.stereotype.Component",
    )

    bad = orchestrator.explain(str(project_builder.path()), "com.example.BadImpl")
    assert bad.factories[_KEY] is None
    assert len(bad.services) == 1
    assert not bad.services[0].accepted
    assert bad.services[0].contract == "com.example.Api"


def test_explain_unknown_type(project_builder: ProjectBuilder) -> None:
    with pytest.raises(AutoRegError):
        Orchestrator().explain(str(project_builder.path()), "com.example.Nope")


def test_declarations_from_later_source_roots_are_visible(project_builder: ProjectBuilder) -> None:
    project_builder.java(
        {
            "com/example/Bar.java": _BAR,
            "com/example/Impl.java": _IMPL.replace("implements Api", "implements ExtendedApi"),
        },
        source_root="src",
    )
    project_builder.java(
        {
            "com/example/MyComponent.java": _MY_COMPONENT,
            "com/example/Api.java": _API,
            "com/example/ExtendedApi.java": "package com.example;\n\npublic interface ExtendedApi extends Api {}\n",
        },
        source_root="generated",
    )
    project_builder.write({".autoreg.yml": "sources: [src, generated]\n"})

    outcome = Orchestrator().run_build(str(project_builder.path()), dry_run=True)

    assert outcome.contents["META-INF/spring.factories"] == f"{_KEY}=\\\ncom.example.Bar\n"
    assert outcome.contents["META-INF/services/com.example.Api"] == "com.example.Impl\n"


def test_debug_option_is_scoped_to_one_build(project_builder: ProjectBuilder) -> None:
    project_builder.java({"com/example/Foo.java": _FOO})
    configure_logging(verbose=False)
    logger = logging.getLogger("autoreg")

    Orchestrator().run_build(str(project_builder.path()), options={"debug": "true"}, dry_run=True)

    assert logger.level == logging.INFO
    assert all(handler.level == logging.INFO for handler in logger.handlers)
