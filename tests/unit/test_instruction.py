"""
Unit tests for decoding converse responses into instructions
"""
import pytest

from converse.domain.models.instruction import Instruction, InstructionType


class TestInstructionDecoding:
    """Tests for Instruction.from_response"""

    @pytest.mark.unit
    def test_message(self):
        instruction = Instruction.from_response({"type": "msg", "msg": "Hello!", "confidence": 0.9})

        assert instruction.type == InstructionType.MESSAGE
        assert instruction.msg == "Hello!"
        assert instruction.confidence == 0.9
        assert not instruction.is_terminal

    @pytest.mark.unit
    def test_merge_keeps_entities(self):
        body = {"type": "merge", "entities": {"location": [{"value": "Paris"}]}}

        instruction = Instruction.from_response(body)

        assert instruction.type == InstructionType.MERGE
        assert instruction.entities == {"location": [{"value": "Paris"}]}
        assert instruction.raw == body

    @pytest.mark.unit
    def test_action(self):
        instruction = Instruction.from_response({"type": "action", "action": "fetch-weather"})

        assert instruction.type == InstructionType.ACTION
        assert instruction.action == "fetch-weather"

    @pytest.mark.unit
    def test_stop_is_terminal(self):
        instruction = Instruction.from_response({"type": "stop"})

        assert instruction.type == InstructionType.STOP
        assert instruction.is_terminal

    @pytest.mark.unit
    def test_unknown_type_is_error(self):
        """Unrecognized types decode to the error variant"""
        instruction = Instruction.from_response({"type": "teleport"})

        assert instruction.type == InstructionType.ERROR
        assert instruction.reason == "Oops, I don't know what to do."

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [{}, {"type": ""}, {"type": None}, None, "stop", ["stop"]])
    def test_missing_type_is_error(self, body):
        """Bodies without a usable type are errors"""
        instruction = Instruction.from_response(body)

        assert instruction.type == InstructionType.ERROR
        assert instruction.reason == "Couldn't find type in Wit response"

    @pytest.mark.unit
    def test_action_without_name_is_error(self):
        instruction = Instruction.from_response({"type": "action"})

        assert instruction.type == InstructionType.ERROR

    @pytest.mark.unit
    def test_explicit_error_type(self):
        instruction = Instruction.from_response({"type": "error"})

        assert instruction.type == InstructionType.ERROR
        assert instruction.is_terminal

    @pytest.mark.unit
    @pytest.mark.parametrize("body, field", [
        ({"type": "msg", "msg": 42}, "msg"),
        ({"type": "action", "action": "book", "confidence": "high"}, "confidence"),
    ])
    def test_wrong_typed_field_is_error(self, body, field):
        """Field type mismatches decode to the error variant instead of raising"""
        instruction = Instruction.from_response(body)

        assert instruction.type == InstructionType.ERROR
        assert instruction.reason == f"Malformed Wit response: {field}"
        assert instruction.raw == body
