from datetime import datetime, timedelta, timezone

import pytest

from awspurge.core.config import Config, AccountConfig, Filter, load_config, parse_duration
from awspurge.core.errors import AccountValidationError, ConfigError, FilterEvaluationError

CONFIG_YAML = """
regions:
  - global
  - eu-west-1
account-blocklist:
  - 111111111111
resource-types:
  excludes: [IAMRole]
feature-flags:
  disable-deletion-protection:
    EC2Instance: true
    ELBv2: "false"
  disable-ec2-instance-stop-protection: true
presets:
  common:
    filters:
      IAMRole:
        - OrganizationAccountAccessRole
accounts:
  222222222222:
    presets: [common]
    resource-types:
      targets: [EC2Instance, IAMRole]
      cloud-control: ["AWS::EC2::Instance"]
    filters:
      IAMRole:
        - property: Name
          type: glob
          value: "keep-*"
      EC2Instance:
        - property: tag:Env
          value: prod
          invert: "true"
"""


@pytest.fixture
def config(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text(CONFIG_YAML)
    return load_config(str(path))


def test_load_config(config):
    assert config.regions == ['global', 'eu-west-1']
    assert config.account_blocklist == ['111111111111']
    assert config.resource_types.excludes == ['IAMRole']
    assert config.feature_flags.disable_deletion_protection == {'EC2Instance': True, 'ELBv2': False}
    assert config.feature_flags.disable_ec2_instance_stop_protection

    account = config.accounts['222222222222']
    assert account.resource_types.targets == ['EC2Instance', 'IAMRole']
    assert account.resource_types.cloud_control == ['AWS::EC2::Instance']
    assert account.filters['EC2Instance'][0].is_inverted()


def test_filters_merge_presets_after_account_filters(config):
    filters = config.filters('222222222222')

    assert [f.value for f in filters['IAMRole']] == ['keep-*', 'OrganizationAccountAccessRole']
    assert filters['IAMRole'][1] == Filter(type='exact', value='OrganizationAccountAccessRole')


def test_filters_for_unconfigured_account_are_empty(config):
    assert config.filters('999999999999') == {}


def test_unknown_preset():
    config = Config(accounts={'1': AccountConfig(presets=['missing'])})
    with pytest.raises(ConfigError):
        config.filters('1')


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / 'nope.yaml'))


def test_invalid_yaml(tmp_path):
    path = tmp_path / 'bad.yaml'
    path.write_text('regions: [unclosed\n')
    with pytest.raises(ConfigError):
        load_config(str(path))


@pytest.mark.parametrize('account_id,aliases,message', [
    ('111111111111', ['sandbox'], 'blocklisted'),
    ('222222222222', [], "doesn't have an alias"),
    ('222222222222', ['team-production'], "substring 'prod'"),
    ('333333333333', ['sandbox'], "isn't listed in the config"),
])
def test_validate_account_rejects(config, account_id, aliases, message):
    with pytest.raises(AccountValidationError) as excinfo:
        config.validate_account(account_id, aliases)
    assert message in str(excinfo.value)


def test_validate_account_requires_blocklist():
    config = Config(accounts={'2': AccountConfig()})
    with pytest.raises(AccountValidationError, match='empty blocklist'):
        config.validate_account('2', ['sandbox'])


def test_validate_account_accepts(config):
    config.validate_account('222222222222', ['sandbox-dev'])


@pytest.mark.parametrize('flt,value,expected', [
    (Filter(value='abc'), 'abc', True),
    (Filter(value='abc'), 'abcd', False),
    (Filter(type='contains', value='bc'), 'abcd', True),
    (Filter(type='glob', value='keep-*'), 'keep-me', True),
    (Filter(type='glob', value='keep-*'), 'drop-me', False),
    (Filter(type='regex', value=r'i-[0-9a-f]+'), 'i-0abc', True),
    (Filter(type='regex', value=r'i-[0-9a-f]+'), 'xi-0abc', True),
    (Filter(type='regex', value=r'^i-[0-9a-f]+$'), 'xi-0abc', False),
    (Filter(type='regex', value='keep'), 'keep-me', True),
])
def test_filter_match(flt, value, expected):
    assert flt.match(value) is expected


def test_date_older_than():
    flt = Filter(type='dateOlderThan', value='24h')
    now = datetime.now(timezone.utc)

    assert flt.match((now - timedelta(hours=1)).isoformat())
    assert not flt.match((now - timedelta(days=3)).isoformat())
    assert not flt.match(str(int((now - timedelta(days=3)).timestamp())))
    assert not flt.match('')


@pytest.mark.parametrize('flt,value', [
    (Filter(type='regex', value='[unclosed'), 'x'),
    (Filter(type='nope', value='x'), 'x'),
    (Filter(type='dateOlderThan', value='soon'), '2024-01-01T00:00:00Z'),
    (Filter(type='dateOlderThan', value='1h'), 'yesterday'),
])
def test_filter_evaluation_errors(flt, value):
    with pytest.raises(FilterEvaluationError):
        flt.match(value)


def test_parse_duration():
    assert parse_duration('1h30m') == timedelta(hours=1, minutes=30)
    assert parse_duration('2d') == timedelta(days=2)
