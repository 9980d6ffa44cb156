from __future__ import annotations

from docutils import nodes
from docutils.parsers.rst import Directive, directives

from .nodes import cite_container


class IdlDirective(Directive):
    has_content = True
    required_arguments = 0
    option_spec = {
        "cite": directives.unchanged,
        "name": directives.unchanged,
    }

    def run(self) -> list[nodes.Node]:
        text = "\n".join(self.content)
        block = nodes.literal_block(text, text, classes=["idl"])
        block.source, block.line = self.state_machine.get_source_and_line(
            self.lineno
        )
        cite = " ".join(self.options.get("cite", "").split())
        if cite:
            block["cite"] = cite
        self.add_name(block)
        return [block]


class CiteContextDirective(Directive):
    has_content = True
    required_arguments = 1
    final_argument_whitespace = True

    def run(self) -> list[nodes.Node]:
        container = cite_container(cite=" ".join(self.arguments[0].split()))
        self.state.nested_parse(self.content, self.content_offset, container)
        return [container]


class InformativeDirective(Directive):
    has_content = True

    def run(self) -> list[nodes.Node]:
        container = nodes.container(classes=["informative"])
        self.state.nested_parse(self.content, self.content_offset, container)
        return [container]
