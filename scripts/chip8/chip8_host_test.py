import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")     # no real window during tests
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
import pygame

from chip8 import MAX_PROGRAM_SIZE, ROM_START_ADDRESS, SCREEN_SIZE, SCREEN_WIDTH, Chip8
from chip8_host import (
    BLUE, INSTRUCTIONS_PER_FRAME, LIGHT_BLUE, SCALE, Screen, get_args, handle_event, load_rom, main,
)


def key_event(event_type, key):
    return pygame.event.Event(event_type, key=key)


class TestArgs(unittest.TestCase):
    def test_defaults(self):
        args = get_args(["-f", "pong.ch8"])
        self.assertEqual(args.file, "pong.ch8")
        self.assertEqual(args.ipf, INSTRUCTIONS_PER_FRAME)
        self.assertEqual(args.scale, SCALE)

    def test_overrides(self):
        args = get_args(["--file", "pong.ch8", "--ipf", "20", "--scale", "4"])
        self.assertEqual((args.ipf, args.scale), (20, 4))

    def test_file_is_required(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            get_args([])

    def test_negative_ipf(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            get_args(["-f", "pong.ch8", "--ipf", "-1"])


class TestLoadRom(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write_rom(self, data):
        path = os.path.join(self.tmpdir.name, "test.ch8")
        with open(path, mode='wb') as f:
            f.write(data)
        return path

    def test_load_rom(self):
        path = self.write_rom(bytes([0x12, 0x00, 0x00, 0xE0]))
        rom = load_rom(path)
        self.assertEqual(rom, bytes([0x12, 0x00, 0x00, 0xE0]))
        c8 = Chip8(rom)
        self.assertEqual(c8.mem[ROM_START_ADDRESS:ROM_START_ADDRESS + 4], rom)

    def test_main_rejects_oversized_rom(self):
        path = self.write_rom(bytes(MAX_PROGRAM_SIZE + 1))
        with self.assertRaises(SystemExit) as ctx:
            main(["-f", path])
        self.assertIn("Unable to load", str(ctx.exception.code))

    def test_main_rejects_missing_rom(self):
        path = os.path.join(self.tmpdir.name, "missing.ch8")
        with self.assertRaises(SystemExit) as ctx:
            main(["-f", path])
        self.assertIn("Unable to load", str(ctx.exception.code))


class TestEvents(unittest.TestCase):
    def setUp(self):
        self.c8 = Chip8(bytes([0xF5, 0x0A, 0x60, 0x01]))

    def test_mapped_key_press_and_release(self):
        self.assertTrue(handle_event(self.c8, key_event(pygame.KEYDOWN, pygame.K_a)))
        self.assertTrue(self.c8.keys[0xA])
        self.assertTrue(handle_event(self.c8, key_event(pygame.KEYUP, pygame.K_a)))
        self.assertFalse(self.c8.keys[0xA])

    def test_unmapped_key_is_ignored(self):
        self.assertTrue(handle_event(self.c8, key_event(pygame.KEYDOWN, pygame.K_z)))
        self.assertTrue(self.c8.keys.untouched())

    def test_key_press_releases_wait(self):
        self.c8.v_regs[5] = 0xB
        self.c8.execute(1)
        self.assertEqual(self.c8.waiting_for_key, 0xB)
        handle_event(self.c8, key_event(pygame.KEYDOWN, pygame.K_5))
        self.assertEqual(self.c8.waiting_for_key, 0xB)
        handle_event(self.c8, key_event(pygame.KEYDOWN, pygame.K_b))
        self.assertIsNone(self.c8.waiting_for_key)
        self.c8.execute(1)
        self.assertEqual(self.c8.v_regs[0], 0x01)

    def test_tab_resets(self):
        self.c8.execute(1)
        self.assertTrue(handle_event(self.c8, key_event(pygame.KEYDOWN, pygame.K_TAB)))
        self.assertEqual(self.c8.pc, ROM_START_ADDRESS)
        self.assertIsNone(self.c8.waiting_for_key)

    def test_return_dumps_display(self):
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertTrue(handle_event(self.c8, key_event(pygame.KEYDOWN, pygame.K_RETURN)))
        self.assertEqual(out.getvalue(), self.c8.dump_display() + "\n")

    def test_quit(self):
        self.assertFalse(handle_event(self.c8, key_event(pygame.KEYDOWN, pygame.K_ESCAPE)))
        self.assertFalse(handle_event(self.c8, pygame.event.Event(pygame.QUIT)))


class TestScreen(unittest.TestCase):
    def setUp(self):
        pygame.display.init()
        self.addCleanup(pygame.display.quit)
        self.screen = Screen(s=2)

    def color_at(self, x, y):
        return self.screen.surface.get_at((x, y))

    def surface_color(self, color):
        surface = self.screen.surface
        return surface.unmap_rgb(surface.map_rgb(color))

    def test_render_lit_pixel(self):
        pixels = bytearray(SCREEN_SIZE)
        pixels[1 * SCREEN_WIDTH + 3] = 255
        self.screen.render(memoryview(pixels).toreadonly())
        lit, unlit = self.surface_color(LIGHT_BLUE), self.surface_color(BLUE)
        for x, y in ((6, 2), (7, 2), (6, 3), (7, 3)):
            self.assertEqual(self.color_at(x, y), lit)
        for x, y in ((0, 0), (5, 2), (8, 2), (6, 4), (127, 63)):
            self.assertEqual(self.color_at(x, y), unlit)

    def test_render_clears_previous_frame(self):
        pixels = bytearray(SCREEN_SIZE)
        pixels[0] = 255
        self.screen.render(pixels)
        self.screen.render(bytes(SCREEN_SIZE))
        self.assertEqual(self.color_at(0, 0), self.surface_color(BLUE))


class TestMainLoop(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.addCleanup(pygame.quit)

    def write_rom(self, data):
        path = os.path.join(self.tmpdir.name, "test.ch8")
        with open(path, mode='wb') as f:
            f.write(data)
        return path

    def test_one_frame(self):
        path = self.write_rom(bytes([
            0xA0, 0x00,     # LD I, 0x000 (glyph 0)
            0xD0, 0x05,     # DRW V0, V0, 5
            0x12, 0x04,     # JP 0x204
        ]))
        frames = []
        render = Screen.render

        def capture(screen, pixels):
            frames.append(bytes(pixels))
            render(screen, pixels)

        with mock.patch.object(Screen, "render", capture), \
                mock.patch("pygame.event.get", return_value=[pygame.event.Event(pygame.QUIT)]):
            main(["-f", path, "--scale", "2"])
        self.assertEqual(len(frames), 1)
        self.assertEqual(frames[0][:8], bytes([255] * 4 + [0] * 4))
        self.assertEqual(frames[0][SCREEN_WIDTH:SCREEN_WIDTH + 4], bytes([255, 0, 0, 255]))

    def test_crash_stops_the_loop(self):
        path = self.write_rom(bytes([0x00, 0xEE]))
        with mock.patch("pygame.event.get", return_value=[]), self.assertRaises(SystemExit) as ctx:
            main(["-f", path, "--scale", "2"])
        message = str(ctx.exception.code)
        self.assertIn("THE EMULATOR CRASHED", message)
        self.assertIn("pc: $0x0200", message)


if __name__ == "__main__":
    unittest.main()
