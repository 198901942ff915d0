"""Shared fixtures: an in-memory catalog and a small Panorama export."""
import pytest

from catalog import Catalog, CatalogBuilder
from parse import PanoramaXmlLoader
from resolve import ReferenceResolver

CATALOG_DATA = {
    'deviceGroups': {
        'Root': {'parent': None, 'children': ['Child1', 'Child2'], 'path': ['Root']},
        'Child1': {'parent': 'Root', 'children': ['Grandchild1'], 'path': ['Root', 'Child1']},
        'Child2': {'parent': 'Root', 'children': [], 'path': ['Root', 'Child2']},
        'Grandchild1': {'parent': 'Child1', 'children': [], 'path': ['Root', 'Child1', 'Grandchild1']},
    },
    'objects': {
        'Shared': {
            'address': {
                'shared-addr1': {'kind': 'ip', 'value': '10.0.0.1'},
                'shared-addr2': {'kind': 'cidr', 'value': '192.168.1.0/24'},
                'dup-addr': {'kind': 'ip', 'value': '1.1.1.1'},
                'leaf': {'kind': 'ip', 'value': '10.9.9.9'},
            },
            'address-group': {
                'shared-group1': {'kind': 'static', 'members': ['shared-addr1', 'shared-addr2']},
                'shared-dynamic-group': {'kind': 'dynamic', 'members': [], 'match': 'tag.env eq "prod"'},
                'self-group': {'kind': 'static', 'members': ['self-group']},
                'cycle-a': {'kind': 'static', 'members': ['cycle-b']},
                'cycle-b': {'kind': 'static', 'members': ['cycle-a']},
                'L1': {'kind': 'static', 'members': ['L2']},
                'L2': {'kind': 'static', 'members': ['L3']},
                'L3': {'kind': 'static', 'members': ['leaf']},
                'branch-a': {'kind': 'static', 'members': ['shared-addr1']},
                'branch-b': {'kind': 'static', 'members': ['shared-addr1']},
                'diamond': {'kind': 'static', 'members': ['branch-a', 'branch-b']},
            },
            'service': {
                'shared-svc1': {'proto': 'tcp', 'ports': ['80', '443']},
                'shared-svc2': {'proto': 'udp', 'ports': ['53']},
                'sctp-svc': {'proto': 'sctp', 'ports': []},
            },
            'service-group': {
                'shared-svc-group': {'members': ['shared-svc1', 'shared-svc2']},
                'sa': {'members': ['sb']},
                'sb': {'members': ['sa']},
                'ss': {'members': ['ss']},
            },
            'application': {
                'web-browsing': {'name': 'web-browsing'},
                'dns': {'name': 'dns'},
            },
            'application-group': {
                'web-apps': {'members': ['web-browsing', 'ssl']},
                'aa': {'members': ['ab']},
                'ab': {'members': ['aa']},
                'as': {'members': ['as', 'dns']},
            },
        },
        'Root': {
            'address': {'root-addr1': {'kind': 'ip', 'value': '10.1.0.1'}},
            'address-group': {
                'root-group1': {'kind': 'static', 'members': ['root-addr1', 'shared-addr1']},
            },
            'service': {'root-svc1': {'proto': 'tcp', 'ports': ['8080']}},
            'service-group': {'root-svc-group': {'members': ['root-svc1', 'shared-svc1']}},
            'application': {'custom-app': {'name': 'custom-app'}},
            'application-group': {'custom-apps': {'members': ['custom-app', 'web-browsing']}},
        },
        'Child1': {
            'address': {
                'child1-addr1': {'kind': 'cidr', 'value': '172.16.0.0/16'},
                'dup-addr': {'kind': 'ip', 'value': '2.2.2.2'},
            },
            'address-group': {
                'child1-group1': {'kind': 'static', 'members': ['child1-addr1', 'root-addr1']},
            },
            'service': {'child1-svc1': {'proto': 'tcp', 'ports': ['9090']}},
            'application': {'child1-app': {'name': 'child1-app'}},
        },
        'Grandchild1': {
            'address': {'gc1-addr1': {'kind': 'ip', 'value': '10.2.0.1'}},
            'address-group': {
                'gc1-group1': {'kind': 'static', 'members': ['gc1-addr1', 'child1-addr1']},
            },
        },
    },
    'zones': {
        'trust': {'scope': 'Shared', 'deviceGroups': []},
        'untrust': {'scope': 'Shared', 'deviceGroups': []},
        'dmz': {'scope': 'Root', 'deviceGroups': ['Root']},
    },
}

SAMPLE_XML = """<?xml version="1.0"?>
<config version="10.2.0">
  <shared>
    <address>
      <entry name="shared-web"><ip-netmask>10.0.0.10</ip-netmask></entry>
      <entry name="shared-range"><ip-range>10.0.0.1-10.0.0.5</ip-range></entry>
      <entry name="shared-fqdn"><fqdn>www.example.com</fqdn></entry>
    </address>
    <service>
      <entry name="svc-web"><protocol><tcp><port>80,443</port></tcp></protocol></entry>
    </service>
    <application>
      <entry name="custom-app"><category>business-systems</category></entry>
    </application>
    <application-group>
      <entry name="custom-apps"><members><member>custom-app</member><member>ssl</member></members></entry>
    </application-group>
  </shared>
  <devices>
    <entry name="localhost.localdomain">
      <template>
        <entry name="net-template">
          <config>
            <devices>
              <entry name="localhost.localdomain">
                <vsys>
                  <entry name="vsys1">
                    <zone>
                      <entry name="trust"/>
                      <entry name="untrust"/>
                      <entry name="dmz"/>
                    </zone>
                  </entry>
                </vsys>
              </entry>
            </devices>
          </config>
        </entry>
      </template>
      <device-group>
        <entry name="Root">
          <address>
            <entry name="root-net"><ip-netmask>10.1.0.0/16</ip-netmask></entry>
          </address>
          <address-group>
            <entry name="web-servers"><static><member>shared-web</member><member>root-net</member></static></entry>
            <entry name="dag-prod"><dynamic><filter>'prod' and 'web'</filter></dynamic></entry>
          </address-group>
          <pre-rulebase>
            <security>
              <rules>
                <entry name="allow web">
                  <from><member>trust</member></from>
                  <to><member>untrust</member></to>
                  <source><member>any</member></source>
                  <destination><member>web-servers</member></destination>
                  <source-user><member>any</member></source-user>
                  <application><member>custom-app</member></application>
                  <service><member>svc-web</member></service>
                  <action>allow</action>
                  <tag><member>prod</member></tag>
                  <description>Allow web traffic</description>
                  <profile-setting>
                    <profiles>
                      <virus><member>default</member></virus>
                      <spyware><member>strict</member></spyware>
                    </profiles>
                  </profile-setting>
                  <target>
                    <devices><entry name="0123456789"/></devices>
                    <negate>no</negate>
                  </target>
                </entry>
                <entry>
                  <from><member>any</member></from>
                  <to><member>any</member></to>
                  <action>allow</action>
                </entry>
                <entry name="app-default">
                  <from><member>dmz</member></from>
                  <to><member>internet</member></to>
                  <source><member>any</member></source>
                  <destination><member>dag-prod</member><member>ghost</member></destination>
                  <application><member>any</member></application>
                  <service><member>application-default</member></service>
                  <action>deny</action>
                  <disabled>yes</disabled>
                  <profile-setting><group><member>default-profile</member></group></profile-setting>
                  <target>
                    <devices><entry name="fw2"/></devices>
                    <negate>yes</negate>
                  </target>
                </entry>
              </rules>
            </security>
          </pre-rulebase>
          <post-rulebase>
            <security>
              <rules>
                <entry name="allow web">
                  <from><member>any</member></from>
                  <to><member>any</member></to>
                  <source><member>any</member></source>
                  <destination><member>any</member></destination>
                  <application><member>any</member></application>
                  <service><member>any</member></service>
                </entry>
              </rules>
            </security>
          </post-rulebase>
        </entry>
        <entry name="Child1">
          <address>
            <entry name="shared-web"><ip-netmask>10.99.0.10</ip-netmask></entry>
          </address>
          <address-group>
            <entry name="loop-grp"><static><member>loop-grp</member></static></entry>
          </address-group>
          <service>
            <entry name="svc-dns"><protocol><udp><port>53</port></udp></protocol></entry>
          </service>
          <service-group>
            <entry name="svc-group-web"><members><member>svc-web</member><member>svc-dns</member></members></entry>
          </service-group>
          <pre-rulebase>
            <security>
              <rules>
                <entry name="allow web">
                  <from><member>trust</member></from>
                  <to><member>untrust</member></to>
                  <source><member>loop-grp</member></source>
                  <destination><member>web-servers</member></destination>
                  <application><member>custom-apps</member></application>
                  <service><member>svc-group-web</member></service>
                  <action>allow</action>
                </entry>
              </rules>
            </security>
          </pre-rulebase>
        </entry>
        <entry name="Orphan"/>
      </device-group>
    </entry>
  </devices>
  <readonly>
    <devices>
      <entry name="localhost.localdomain">
        <device-group>
          <entry name="Root"><id>11</id></entry>
          <entry name="Child1"><parent-dg>Root</parent-dg><id>12</id></entry>
          <entry name="Orphan"><parent-dg>Missing</parent-dg><id>13</id></entry>
        </device-group>
      </entry>
    </devices>
  </readonly>
</config>
"""


@pytest.fixture
def catalog():
    return Catalog.from_mapping(CATALOG_DATA)


@pytest.fixture
def resolver(catalog):
    return ReferenceResolver(catalog)


@pytest.fixture
def loader():
    return PanoramaXmlLoader()


@pytest.fixture
def sample_root(loader):
    return loader.load_string(SAMPLE_XML)


@pytest.fixture
def sample_builder():
    return CatalogBuilder()


@pytest.fixture
def sample_catalog(sample_root, sample_builder):
    return sample_builder.build(sample_root)


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / 'panorama.xml'
    path.write_text(SAMPLE_XML, encoding='utf-8')
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yml'
    path.write_text('tenant: fixture-tenant\n', encoding='utf-8')
    return path
