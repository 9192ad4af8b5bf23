from __future__ import annotations
import argparse, logging, pathlib, sys, traceback
from . import read, write
from .analyze import IMPORT_MODES
from .config import load_config, get_playback_bpm
from .util.time import ticks_to_real_seconds

def _cmd_info(comp, cfg):
    bpm = get_playback_bpm(cfg)
    print(f"[cli] {comp}")
    for i, t in enumerate(comp.tracks):
        secs = ticks_to_real_seconds(t.duration, bpm)
        print(f"[cli] track {i}: channel={t.channel} instrument={t.instrument} "
              f"duration={t.duration} ({secs:.2f}s @ {bpm:g} bpm)")
    longest = comp.longest_track()
    if longest is not None:
        print(f"[cli] longest track: channel={longest.channel} duration={longest.duration}")

def main(argv=None):
    p = argparse.ArgumentParser(prog="genmidi", description="MIDI <-> symbolic composition model")
    p.add_argument("--config", dest="config", default=None, help="YAML config (defaults applied if omitted)")
    p.add_argument("--mode", choices=IMPORT_MODES, default=None, help="Import mode (default from config)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    p_info = sub.add_parser("info", help="Import a MIDI file and print the composition")
    p_info.add_argument("infile")

    p_conv = sub.add_parser("convert", help="Import a MIDI file and export it again")
    p_conv.add_argument("infile")
    p_conv.add_argument("outfile")

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    in_path = pathlib.Path(args.infile).expanduser().resolve()
    if not in_path.exists():
        print(f"[cli] ERROR: Input not found: {in_path}", file=sys.stderr)
        sys.exit(1)

    cfg = load_config(args.config)
    print(f"[cli] infile = {in_path}")

    try:
        comp = read.load_midi(in_path, cfg, mode=args.mode)
        if args.command == "info":
            _cmd_info(comp, cfg)
        else:
            out_path = pathlib.Path(args.outfile).expanduser().resolve()
            ef = write.save_midi(comp, out_path, cfg)
            print(f"[cli] wrote     -> {out_path}")
            print(f"[cli] Done. tracks={len(ef.tracks)} tpb={ef.ticks_per_quarter_note}")
    except Exception:
        traceback.print_exc()
        sys.exit(2)

if __name__ == "__main__":
    main()
