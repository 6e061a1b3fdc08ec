"""
Script to generate sample Certificate of Currency PDFs and an image certificate.

File names carry the scenario keywords understood by coc_verifier.fixtures,
so the same names can be used to build matching extracted data in demos.
"""

import os
from datetime import date, datetime

from PIL import Image, ImageDraw

from coc_verifier.fixtures import build_policy_data, render_certificate_pdf

OUTPUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "certificates")

SAMPLES = {
    "coc_compliant.pdf": "Guidewire PolicyCenter",
    "coc_expiring_soon.pdf": "Guidewire PolicyCenter",
    "coc_expired.pdf": "Guidewire PolicyCenter",
    "coc_early_expiry.pdf": "Duck Creek Policy",
    "coc_no_pi.pdf": "Microsoft Word",
    "coc_no_cross.pdf": "Microsoft Word",
    "coc_vic_wc.pdf": "Crystal Reports",
    "coc_unknown_insurer.pdf": "Microsoft Word",
    "coc_invalid_abn.pdf": "Microsoft Word",
    "coc_edited.pdf": "Foxit PhantomPDF",
}


def create_certificate_pdfs(today: date) -> None:
    """Render one PDF per sample scenario."""
    for file_name, creator in SAMPLES.items():
        data = build_policy_data(today, file_name=file_name)
        path = os.path.join(OUTPUT_DIR, file_name)
        render_certificate_pdf(data, output=path, creator=creator)
        print(f"Created {path}")


def create_photographed_certificate(today: date) -> None:
    """A phone photo of a certificate, with EXIF software showing it was edited."""
    data = build_policy_data(today, file_name="coc_photo_modified.jpg")
    image = Image.new("RGB", (1200, 900), color=(250, 250, 245))
    draw = ImageDraw.Draw(image)

    lines = [
        "CERTIFICATE OF CURRENCY",
        f"Insured: {data.insured_party_name}",
        f"ABN: {data.insured_party_abn}",
        f"Insurer: {data.insurer_name}",
        f"Policy Number: {data.policy_number}",
        f"Period of Insurance: {data.period_of_insurance_start} to {data.period_of_insurance_end}",
    ]
    for i, line in enumerate(lines):
        draw.text((60, 60 + i * 50), line, fill=(20, 20, 20))

    exif = image.getexif()
    exif[0x0131] = "Adobe Photoshop 25.0"
    exif[0x0132] = datetime.now().strftime("%Y:%m:%d %H:%M:%S")

    path = os.path.join(OUTPUT_DIR, "coc_photo_modified.jpg")
    image.save(path, "JPEG", exif=exif)
    print(f"Created {path}")


def main():
    os.makedirs(OUTPUT_DIR, exist_ok=True)
    today = date.today()
    create_certificate_pdfs(today)
    create_photographed_certificate(today)
    print("\nSample certificates created successfully!")


if __name__ == "__main__":
    main()
