import unittest

from scene import SceneBuilder


class SceneBuilderTests(unittest.TestCase):
    def test_reset_starts_with_base_font(self):
        doc = SceneBuilder().build()
        self.assertEqual(doc.directives, ("@fontsize 32",))

    def test_directives_keep_call_order(self):
        builder = SceneBuilder()
        builder.set_attribute("justify", "left")
        builder.add_widget("label", 10, 20, 300, 50, "Hello world")
        builder.add_widget("button", 10, 90, 300, 50, "Go", "go")

        self.assertEqual(
            builder.build().serialize(),
            "@fontsize 32\n@justify left\n[label 10 20 300 50 Hello world]\n[button:go 10 90 300 50 Go]\n",
        )

    def test_out_of_canvas_coordinates_are_accepted(self):
        doc = SceneBuilder().add_widget("label", -50, 99999, 0, 0, "x").build()
        self.assertIn("[label -50 99999 0 0 x]", doc.directives)

    def test_multiline_label_stays_on_one_line(self):
        doc = SceneBuilder().add_widget("label", 0, 0, 1, 1, "first\nsecond").build()
        self.assertEqual(doc.directives[-1], "[label 0 0 1 1 first second]")

    def test_empty_label_is_omitted(self):
        doc = SceneBuilder().add_widget("textinput", 0, 0, 1, 1, "", "field").build()
        self.assertEqual(doc.directives[-1], "[textinput:field 0 0 1 1]")

    def test_snapshot_is_not_affected_by_later_calls(self):
        builder = SceneBuilder()
        first = builder.build()
        builder.add_widget("label", 0, 0, 1, 1, "later")
        self.assertEqual(len(first), 1)

    def test_reset_clears_previous_widgets(self):
        builder = SceneBuilder(font_size=48)
        builder.add_widget("label", 0, 0, 1, 1, "gone")
        self.assertEqual(builder.reset().build().directives, ("@fontsize 48",))


if __name__ == "__main__":
    unittest.main()
