"""
Unit tests for action registry validation
"""
import pytest

from converse.domain.actions.action_registry import ActionRegistry
from converse.domain.actions.action_validator import count_positional_parameters
from converse.domain.errors import ActionValidationError


def say(session_id, context, message, callback):
    callback()


def merge(session_id, context, entities, message, callback):
    callback(context)


def error(session_id, context, err):
    pass


def custom(session_id, context, callback):
    callback(context)


def valid_actions(**overrides):
    actions = {"say": say, "merge": merge, "error": error}
    actions.update(overrides)
    return actions


class TestRegistryConstruction:
    """Tests for accepted registries"""

    @pytest.mark.unit
    def test_minimal_registry_is_valid(self):
        """say, merge and error alone are enough"""
        registry = ActionRegistry(valid_actions())

        assert set(registry) == {"say", "merge", "error"}
        assert registry["say"] is say
        assert registry.custom_actions == []

    @pytest.mark.unit
    def test_custom_actions_are_kept(self):
        """Extra named actions are registered"""
        registry = ActionRegistry(valid_actions(**{"fetch-weather": custom}))

        assert "fetch-weather" in registry
        assert registry.custom_actions == ["fetch-weather"]
        assert len(registry) == 4

    @pytest.mark.unit
    def test_async_handlers_are_accepted(self):
        """Coroutine functions follow the same conventions"""

        async def async_say(session_id, context, message, callback):
            callback()

        async def async_custom(session_id, context, callback):
            callback(context)

        registry = ActionRegistry(valid_actions(say=async_say, lookup=async_custom))

        described = {entry["name"]: entry for entry in registry.describe()}
        assert described["say"]["is_async"] is True
        assert described["lookup"]["kind"] == "custom"
        assert described["merge"]["is_async"] is False

    @pytest.mark.unit
    def test_bound_methods_are_accepted(self):
        """self does not count towards the arity"""

        class Bot:
            def say(self, session_id, context, message, callback):
                callback()

            def merge(self, session_id, context, entities, message, callback):
                callback(context)

            def error(self, session_id, context, err):
                pass

        bot = Bot()
        registry = ActionRegistry({"say": bot.say, "merge": bot.merge, "error": bot.error})

        assert len(registry) == 3

    @pytest.mark.unit
    def test_registry_is_read_only(self):
        """No item assignment on a built registry"""
        registry = ActionRegistry(valid_actions())

        with pytest.raises(TypeError):
            registry["say"] = say

    @pytest.mark.unit
    def test_registry_copies_input(self):
        """Later changes to the source mapping are not seen"""
        source = valid_actions()
        registry = ActionRegistry(source)
        source["late"] = custom

        assert "late" not in registry


class TestRegistryValidation:
    """Tests for rejected registries"""

    @pytest.mark.unit
    @pytest.mark.parametrize("missing", ["say", "merge", "error"])
    def test_required_action_missing(self, missing):
        """Each of say, merge and error is mandatory"""
        actions = valid_actions()
        del actions[missing]

        with pytest.raises(ActionValidationError, match=f"The '{missing}' action is missing"):
            ActionRegistry(actions)

    @pytest.mark.unit
    def test_not_a_mapping(self):
        """A list of handlers is refused"""
        with pytest.raises(ActionValidationError, match="should be a mapping"):
            ActionRegistry([say, merge, error])

    @pytest.mark.unit
    def test_non_callable_entry(self):
        """Every entry must be callable"""
        with pytest.raises(ActionValidationError, match="The 'greet' action should be a function"):
            ActionRegistry(valid_actions(greet="hello"))

    @pytest.mark.unit
    @pytest.mark.parametrize("name,handler,expected", [
        ("say", lambda session_id, context, message: None, "4 arguments"),
        ("merge", lambda session_id, context, entities, callback: None, "5 arguments"),
        ("error", lambda session_id, context, err, callback: None, "3 arguments"),
        ("lookup", lambda session_id, context: None, "3 arguments"),
        ("lookup", lambda session_id, context, message, callback: None, "3 arguments"),
    ])
    def test_wrong_arity(self, name, handler, expected):
        """Each kind has a fixed parameter count"""
        with pytest.raises(ActionValidationError, match=expected):
            ActionRegistry(valid_actions(**{name: handler}))

    @pytest.mark.unit
    def test_required_keyword_only_parameter_rejected(self):
        """Handlers cannot demand extra keyword arguments"""

        def say_kw(session_id, context, message, callback, *, voice):
            callback()

        with pytest.raises(ActionValidationError):
            ActionRegistry(valid_actions(say=say_kw))

    @pytest.mark.unit
    def test_validation_error_is_a_value_error(self):
        """Construction failures are ordinary ValueErrors too"""
        with pytest.raises(ValueError):
            ActionRegistry({})


class TestParameterCounting:
    """Tests for arity inspection"""

    @pytest.mark.unit
    def test_defaults_still_count(self):
        def handler(a, b, c=None):
            pass

        assert count_positional_parameters(handler) == 3

    @pytest.mark.unit
    def test_var_args_do_not_count(self):
        def handler(a, *args, **kwargs):
            pass

        assert count_positional_parameters(handler) == 1
