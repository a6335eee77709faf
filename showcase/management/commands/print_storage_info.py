from django.conf import settings
from django.core.files.base import ContentFile
from django.core.management.base import BaseCommand

from showcase.models import PortfolioItem, Profile
from showcase.storage_backends import SupabaseMediaStorage, media_storage, supabase_configured


class Command(BaseCommand):
    help = "Print the effective media storage and optionally run a tiny upload round trip"

    def add_arguments(self, parser):
        parser.add_argument(
            "--upload-test",
            action="store_true",
            help="Upload, read back and delete a small object through the media storage.",
        )

    def handle(self, *args, **options):
        self.stdout.write("== Storage configuration ==")
        self.stdout.write(f"DEBUG: {settings.DEBUG}")
        self.stdout.write(f"MEDIA_URL: {settings.MEDIA_URL}")
        self.stdout.write(f"Supabase configured: {supabase_configured()}")

        storage = media_storage()
        self.stdout.write(f"Media storage class: {type(storage).__name__}")
        self.stdout.write(f"Profile.avatar storage: {type(Profile._meta.get_field('avatar').storage).__name__}")
        self.stdout.write(f"PortfolioItem.image storage: {type(PortfolioItem._meta.get_field('image').storage).__name__}")

        if isinstance(storage, SupabaseMediaStorage):
            self.stdout.write(f"Supabase bucket: {storage.bucket}")
            self.stdout.write(f"Supabase public base: {storage.public_base}")

        if not options["upload_test"]:
            return

        self.stdout.write("\n== Upload test ==")
        name = storage.save("check/hello.txt", ContentFile(b"hello-from-storage-check"))
        try:
            self.stdout.write(f"Saved as: {name}")
            self.stdout.write(f"Public URL: {storage.url(name)}")
            with storage.open(name) as fh:
                self.stdout.write(f"Read back {len(fh.read())} bytes")
        finally:
            storage.delete(name)
        self.stdout.write(self.style.SUCCESS("Done."))
