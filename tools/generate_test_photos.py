"""
Generate synthetic top-view and side-view parcel photos for manual testing
Each photo shows a parcel and a credit card (85.60 x 53.98 mm) lying next to it,
rendered at a known pixels-per-mm so the measured result can be checked:
- top.png: parcel top face (length x width) seen from above
- side.png: parcel side (length x height) seen from the side
- photos_metadata.json: parcel size, scale and expected locker size
"""

import argparse
import json
import os

import cv2
import numpy as np

from measurelib.locker import recommend

# Card size per ISO/IEC 7810 ID-1
CARD_W_MM = 85.60
CARD_H_MM = 53.98

# Colors (BGR format for OpenCV)
TABLE_BG = (170, 190, 205)
CARDBOARD = (95, 150, 200)
CARDBOARD_EDGE = (40, 80, 120)
CARD_BLUE = (160, 90, 30)


def mm(value, px_per_mm):
    return int(round(value * px_per_mm))


def draw_card(img, x, y, px_per_mm):
    """Draw the reference card with its top-left corner at (x, y)"""
    w, h = mm(CARD_W_MM, px_per_mm), mm(CARD_H_MM, px_per_mm)
    cv2.rectangle(img, (x, y), (x + w, y + h), CARD_BLUE, -1)
    cv2.rectangle(img, (x, y), (x + w, y + h), (255, 255, 255), 2)
    cv2.putText(img, "85.6 mm", (x + 10, y + h // 2), cv2.FONT_HERSHEY_SIMPLEX,
                0.6, (255, 255, 255), 2)
    return (x, y + h + 8), (x + w, y + h + 8)


def draw_box(img, x, y, w_mm, h_mm, px_per_mm):
    w, h = mm(w_mm, px_per_mm), mm(h_mm, px_per_mm)
    cv2.rectangle(img, (x, y), (x + w, y + h), CARDBOARD, -1)
    cv2.rectangle(img, (x, y), (x + w, y + h), CARDBOARD_EDGE, 3)
    # Packing tape
    cv2.rectangle(img, (x + w // 2 - 12, y), (x + w // 2 + 12, y + h), (150, 190, 220), -1)
    return [x, y, w, h]


def render(face_w_mm, face_h_mm, px_per_mm, margin_mm=40):
    """Render one photo: card on the left, parcel face on the right"""
    width = mm(margin_mm * 3 + CARD_W_MM + face_w_mm, px_per_mm)
    height = mm(margin_mm * 2 + max(CARD_H_MM, face_h_mm), px_per_mm)
    image = np.full((height, width, 3), TABLE_BG, dtype=np.uint8)

    margin = mm(margin_mm, px_per_mm)
    card_line = draw_card(image, margin, margin, px_per_mm)
    box_x = margin * 2 + mm(CARD_W_MM, px_per_mm)
    box = draw_box(image, box_x, margin, face_w_mm, face_h_mm, px_per_mm)
    return image, card_line, box


def main():
    parser = argparse.ArgumentParser(description='Generate synthetic parcel photos')
    parser.add_argument('--length', type=float, default=250.0, help='Parcel length in mm (default: 250)')
    parser.add_argument('--width', type=float, default=180.0, help='Parcel width in mm (default: 180)')
    parser.add_argument('--height', type=float, default=95.8, help='Parcel height in mm (default: 95.8)')
    parser.add_argument('--px-per-mm', type=float, default=4.0, help='Rendering scale (default: 4.0)')
    parser.add_argument('--out', default=os.path.join(os.path.dirname(__file__), "..", "test"),
                        help='Output directory (default: test/)')
    args = parser.parse_args()

    os.makedirs(args.out, exist_ok=True)
    print("Generating test photos:")
    print(f"  Parcel: {args.length} x {args.width} x {args.height} mm at {args.px_per_mm} px/mm")

    top, top_card, top_box = render(args.length, args.width, args.px_per_mm)
    side, side_card, side_box = render(args.length, args.height, args.px_per_mm)

    top_path = os.path.join(args.out, "top.png")
    side_path = os.path.join(args.out, "side.png")
    cv2.imwrite(top_path, top)
    cv2.imwrite(side_path, side)
    print(f"[OK] Saved {top_path} ({top.shape[1]}x{top.shape[0]})")
    print(f"[OK] Saved {side_path} ({side.shape[1]}x{side.shape[0]})")

    expected = recommend(args.length, args.width, args.height)
    metadata = {
        "description": "Synthetic parcel photos",
        "parcel_mm": {"length": args.length, "width": args.width, "height": args.height},
        "px_per_mm": args.px_per_mm,
        "reference": {"length_mm": CARD_W_MM},
        "top": {"calibration_line": [list(p) for p in top_card], "rect": top_box},
        "side": {"calibration_line": [list(p) for p in side_card],
                 "height_line": [[side_box[0] + side_box[2] // 2, side_box[1]],
                                 [side_box[0] + side_box[2] // 2, side_box[1] + side_box[3]]]},
        "expected": expected.to_dict(),
    }

    metadata_path = os.path.join(args.out, "photos_metadata.json")
    with open(metadata_path, 'w') as f:
        json.dump(metadata, f, indent=2)
    print(f"[OK] Saved metadata: {metadata_path}")

    print(f"\nExpected locker: {expected.size} ({expected.reason})")
    print("\nTo try it:")
    print(f"  python parcelmeasure.py {top_path} {side_path}")


if __name__ == "__main__":
    main()
