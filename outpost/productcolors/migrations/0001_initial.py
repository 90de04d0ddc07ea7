from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='RgbValue',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rgb_text', models.CharField(help_text='"R G B" as it appears in the feed', max_length=64, unique=True)),
                ('hex', models.CharField(help_text='#RRGGBB', max_length=7)),
            ],
            options={
                'verbose_name': 'RGB value',
                'verbose_name_plural': 'RGB values',
                'ordering': ['rgb_text'],
            },
        ),
    ]
