"""Pytest configuration and fixtures for lbconv tests."""

import pytest


@pytest.fixture
def config_edit_dump():
    """Sample config/edit dump with a forward reference and dangling names."""
    return '''#config-version=FADV1K-6.2.0-build0318-200520:opmode=0:vdom=0:user=admin
#conf_file_ver=2714261939436104
config system global
  set hostname "FAD-LAB"
end
config system health-check
  edit "HC_HTTP"
    set type http
    set interval 10
    set timeout 5
    set retry 2
    set send-string "/health"
    set status-code 200
    set hostname www.example.com
  next
  edit "HC_TCP"
    set type tcp
  next
end
config load-balance real-server
  edit "rs1"
    set ip 10.0.0.11
    set status enable
  next
  edit "rs2"
    set ip 10.0.0.12
    set status disable
  next
  edit "rs6"
    set ip6 2001:db8::12
  next
end
config load-balance pool
  edit "web_pool"
    set health-check enable
    set health-check-relationship OR
    set health-check-list "HC_HTTP" "HC_TCP"
    config pool_member
      edit 1
        set port 80
        set real-server rs1
        set weight 5
      next
      edit 2
        set port http
        set real-server rs2
        set backup enable
      next
    end
  next
  edit "nohc_pool"
    set health-check disable
    config pool_member
      edit 1
        set real-server ghost
      next
    end
  next
end
config load-balance virtual-server
  edit "vs_web"
    set type l7-load-balance
    set address 192.0.2.10
    set port 443
    set load-balance-profile LB_PROF_HTTPS
    set client-ssl-profile LB_CLIENT_SSL
    set load-balance-method LB_METHOD_LEAST_CONNECTION
    set load-balance-persistence LB_PERSIS_SRC_ADDR
    set load-balance-pool web_pool
  next
  edit "vs_orphan"
    set address 192.0.2.11
    set port 80
    set load-balance-pool missing_pool
  next
  edit "vs_forward"
    set address 192.0.2.12
    set load-balance-pool late_pool
  next
end
config load-balance pool
  edit "late_pool"
  next
end
config system certificate local
  edit "site"
    set certificate "/certs/site.crt"
    set key "/certs/site.key"
  next
end
'''


@pytest.fixture
def brace_dump():
    """Sample brace dump with skipped profile and rule bodies."""
    return r'''#TMSH-VERSION: 15.1.8

sys global-settings {
    hostname bigip1.example.com
}
ltm node /Common/web1 {
    address 10.0.0.11
}
ltm node /Common/10.0.0.12 {
    address 10.0.0.12
    session user-disabled
}
ltm monitor http /Common/hc_http {
    defaults-from /Common/http
    interval 5
    recv "200 OK"
    send "GET /health HTTP/1.1\r\nHost: www.example.com\r\nConnection: close\r\n\r\n"
    timeout 16
}
ltm monitor tcp /Common/hc_tcp {
    defaults-from /Common/tcp
    interval 10
    timeout indefinite
}
ltm profile http /Common/http_custom {
    app-service none
    defaults-from /Common/http
    header-insert "X-Test: {value}"
}
ltm rule /Common/redirect_rule {
    when HTTP_REQUEST {
        if { [HTTP::uri] starts_with "/old" } {
            HTTP::redirect "https://[HTTP::host]/new"
        }
    }
}
ltm pool /Common/web_pool {
    load-balancing-mode least-connections-member
    members {
        /Common/web1:80 {
            address 10.0.0.11
        }
        /Common/10.0.0.12:http {
            address 10.0.0.12
            ratio 3
        }
    }
    monitor /Common/hc_http and /Common/hc_tcp
    service-down-action reset
}
ltm pool /Common/any_pool {
    members {
        /Common/web1:8080 {
            address 10.0.0.11
        }
    }
    monitor min 1 of { /Common/hc_tcp /Common/missing_hc }
}
ltm virtual /Common/vs_https {
    destination /Common/10.0.0.5:https
    ip-protocol tcp
    mask 255.255.255.255
    persist {
        /Common/cookie {
            default yes
        }
    }
    pool /Common/web_pool
    profiles {
        /Common/http { }
        /Common/tcp {
            context all
        }
    }
    rules {
        /Common/redirect_rule
    }
    source 0.0.0.0/0
}
ltm virtual /Common/vs_443 {
    destination /Common/10.0.0.5:443
    pool /Common/nope
    disabled
}
ltm virtual /Common/vs_v6 {
    destination /Common/2001:db8::5.80
    ip-forward
    pool none
}
sys file ssl-cert /Common/site.crt {
    cache-path /config/filestore/files_d/Common_d/certificate_d/:Common:site.crt_1
}
sys file ssl-key /Common/site.key {
    cache-path /config/filestore/files_d/Common_d/certificate_key_d/:Common:site.key_1
}
'''
