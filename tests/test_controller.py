import unittest

from controller import ConfigurationController, FormState, SessionChoice, apply_event, render_form
from errors import InvariantError, ProtocolError
from models import HISTORY_SOURCE, USB_SOURCE, CandidateList, Endpoint, InputModeFlags
from renderer import Selected, TextChanged


class ScriptedRenderer:
    def __init__(self, events):
        self.events = list(events)
        self.documents = []

    def present(self, document):
        self.documents.append(document)
        return self.events.pop(0)


def make_state(usb=(), history=()):
    return FormState(
        usb_candidates=CandidateList(USB_SOURCE, tuple(usb)),
        history_candidates=CandidateList(HISTORY_SOURCE, tuple(history)),
    )


def buttons_with_prefix(document, prefix):
    return [line for line in document if line.startswith(f"[button:{prefix}")]


class InputModeFlagsTests(unittest.TestCase):
    def test_toggle_is_an_involution(self):
        for kind in ("buttons", "pen", "touch"):
            with self.subTest(kind=kind):
                flags = InputModeFlags()
                self.assertNotEqual(flags.toggle(kind), flags)
                self.assertEqual(flags.toggle(kind).toggle(kind), flags)

    def test_viewer_flags_follow_disabled_modes(self):
        self.assertEqual(InputModeFlags().viewer_flags(), [])
        self.assertEqual(InputModeFlags(pen=False).viewer_flags(), ["--no-pen"])
        self.assertEqual(
            InputModeFlags(buttons=False, pen=False, touch=False).viewer_flags(),
            ["--no-buttons", "--no-pen", "--no-touch"],
        )

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            InputModeFlags().toggle("keyboard")


class RenderFormTests(unittest.TestCase):
    def test_one_button_per_candidate(self):
        for count in (0, 1, 4):
            with self.subTest(count=count):
                usb = [Endpoint(f"10.11.99.{i}", 5900) for i in range(count)]
                history = [Endpoint(f"192.168.0.{i}", 5901) for i in range(count + 1)]
                doc = render_form(make_state(usb, history))
                self.assertEqual(len(buttons_with_prefix(doc, "usbsrv-")), count)
                self.assertEqual(len(buttons_with_prefix(doc, "histsrv-")), count + 1)

    def test_widgets_show_form_state(self):
        state = FormState(manual_host="pc.local", manual_port="5901", input_modes=InputModeFlags(pen=False))
        lines = list(render_form(state))

        self.assertEqual(lines[0], "@fontsize 32")
        self.assertTrue(any(line.startswith("[textinput:manualhost ") and line.endswith(" pc.local]") for line in lines))
        self.assertTrue(any(line.startswith("[textinput:manualport ") and line.endswith(" 5901]") for line in lines))
        self.assertTrue(any(line.startswith("[button:togglepen ") and line.endswith("[ ] Pen]") for line in lines))
        self.assertTrue(any(line.startswith("[button:toggletouch ") and line.endswith("[x] Touch]") for line in lines))
        self.assertTrue(any(line.startswith("[button:manualsrv ") for line in lines))
        self.assertTrue(any(line.startswith("[button:quit ") for line in lines))


class ApplyEventTests(unittest.TestCase):
    def test_candidate_selection_resolves_in_source_order(self):
        usb = [Endpoint("10.11.99.1", 5900), Endpoint("10.11.99.1", 5901), Endpoint("10.11.99.2", 5900)]
        history = [Endpoint("h0", 5900), Endpoint("h1", 5900)]
        state = make_state(usb, history)
        for index, endpoint in enumerate(usb):
            _, choice, done = apply_event(state, Selected(f"usbsrv-{index}"))
            self.assertTrue(done)
            self.assertEqual(choice.endpoint, endpoint)
        for index, endpoint in enumerate(history):
            _, choice, _ = apply_event(state, Selected(f"histsrv-{index}"))
            self.assertEqual(choice.endpoint, endpoint)

    def test_out_of_range_candidate_is_an_invariant_error(self):
        with self.assertRaises(InvariantError):
            apply_event(make_state([Endpoint("a", 1)]), Selected("usbsrv-1"))

    def test_text_changes_update_manual_fields(self):
        state, choice, done = apply_event(FormState(), TextChanged("manualhost", "pc"))
        state, choice, done = apply_event(state, TextChanged("manualport", "5902"))
        self.assertEqual((state.manual_host, state.manual_port), ("pc", "5902"))
        self.assertIsNone(choice)
        self.assertFalse(done)

    def test_transitions_do_not_mutate_previous_state(self):
        before = FormState()
        after, _, _ = apply_event(before, Selected("togglepen"))
        self.assertTrue(before.input_modes.pen)
        self.assertFalse(after.input_modes.pen)

    def test_manual_entry_is_passed_through_unvalidated(self):
        state = FormState(manual_host="not a host", manual_port="port?")
        _, choice, done = apply_event(state, Selected("manualsrv"))
        self.assertTrue(done)
        self.assertEqual(choice.endpoint, Endpoint("not a host", "port?"))

    def test_non_ascii_digit_port_is_kept_as_text(self):
        for port in ("\u00b2", "\u0665\u0669\u0660\u0660"):
            with self.subTest(port=port):
                state = FormState(manual_host="pc", manual_port=port)
                _, choice, _ = apply_event(state, Selected("manualsrv"))
                self.assertEqual(choice.endpoint, Endpoint("pc", port))

    def test_ascii_port_with_padding_becomes_a_number(self):
        state = FormState(manual_host=" pc ", manual_port=" 5901 ")
        _, choice, _ = apply_event(state, Selected("manualsrv"))
        self.assertEqual(choice.endpoint, Endpoint("pc", 5901))

    def test_quit_is_terminal_without_choice(self):
        self.assertEqual(apply_event(FormState(), Selected("quit"))[1:], (None, True))

    def test_unknown_ids_are_rejected(self):
        for event in (Selected("reboot"), Selected("usbsrv-x"), Selected("togglemouse"), TextChanged("other", "v")):
            with self.subTest(event=event):
                with self.assertRaises(ProtocolError):
                    apply_event(FormState(), event)


class ConfigurationControllerTests(unittest.TestCase):
    def test_loops_until_terminal_event(self):
        renderer = ScriptedRenderer([
            TextChanged("manualhost", "192.168.1.5"),
            Selected("togglebuttons"),
            TextChanged("manualport", "5900"),
            Selected("manualsrv"),
        ])
        choice = ConfigurationController(renderer, FormState()).run()

        self.assertEqual(choice, SessionChoice(Endpoint("192.168.1.5", 5900), InputModeFlags(buttons=False)))
        self.assertEqual(len(renderer.documents), 4)
        self.assertTrue(any(line.endswith(" 192.168.1.5]") for line in renderer.documents[1]))

    def test_quit_returns_none(self):
        renderer = ScriptedRenderer([Selected("toggletouch"), Selected("quit")])
        self.assertIsNone(ConfigurationController(renderer, FormState()).run())

    def test_protocol_error_aborts_the_loop(self):
        renderer = ScriptedRenderer([Selected("bogus"), Selected("quit")])
        with self.assertRaises(ProtocolError):
            ConfigurationController(renderer, FormState()).run()
        self.assertEqual(len(renderer.documents), 1)


if __name__ == "__main__":
    unittest.main()
