"""Tests for the preset rendering script."""

from PIL import Image as PILImage

from examples.render_scene import parse_args, render_scene


class TestParseArgs:
    """Tests for command-line parsing."""

    def test_defaults(self):
        args = parse_args([])
        assert args.preset == "lens"
        assert (args.width, args.height) == (512, 512)
        assert args.samples == 64
        assert args.max_depth == 3
        assert args.seed == 0
        assert args.output == "out.png"
        assert not args.quiet

    def test_overrides(self):
        args = parse_args(
            ["--preset", "prism", "--width", "32", "--max-depth", "5", "--seed", "9", "--quiet"]
        )
        assert args.preset == "prism"
        assert args.width == 32
        assert args.max_depth == 5
        assert args.seed == 9
        assert args.quiet


class TestRenderScene:
    """End-to-end render to a file."""

    def test_writes_image(self, tmp_path):
        output = render_scene(
            preset="emitter",
            width=6,
            height=4,
            samples=4,
            output_path=str(tmp_path / "emitter.png"),
            quiet=True,
        )
        assert output.exists()
        with PILImage.open(output) as img:
            assert img.size == (6, 4)

    def test_progress_output(self, tmp_path, capsys):
        render_scene(
            preset="emitter",
            width=2,
            height=2,
            samples=2,
            output_path=str(tmp_path / "out.png"),
        )
        out = capsys.readouterr().out
        assert "Progress: 2/2 rows" in out
        assert "Saved to:" in out
