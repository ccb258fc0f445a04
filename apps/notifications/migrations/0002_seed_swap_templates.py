from django.db import migrations

TEMPLATES = [
    ("offer.created", "Offer published", 'Your offer "{offer_title}" is now live.'),
    ("request.created", "New swap request", '{actor_name} sent you a swap request for "{offer_title}".'),
    ("request.responded", "Swap request update", 'Your swap request for "{offer_title}" was {decision}.'),
    ("request.confirmed", "Swap confirmed", 'The swap for "{offer_title}" is confirmed.'),
    ("transaction.completed", "Swap completed", 'The swap for "{offer_title}" has been completed.'),
    ("dispute.raised", "Dispute raised", "{actor_name} raised a dispute on {resource} #{resource_id}."),
]


def create_swap_templates(apps, schema_editor):
    NotificationTemplate = apps.get_model("notifications", "NotificationTemplate")
    for event, subject, body in TEMPLATES:
        NotificationTemplate.objects.update_or_create(
            event=event, defaults={"subject": subject, "body": body}
        )


def remove_swap_templates(apps, schema_editor):
    NotificationTemplate = apps.get_model("notifications", "NotificationTemplate")
    NotificationTemplate.objects.filter(event__in=[event for event, _, _ in TEMPLATES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("notifications", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(create_swap_templates, remove_swap_templates),
    ]
